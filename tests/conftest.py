"""Shared fixtures: an in-memory SQLite database seeded with the demo data."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before vehicle_booking.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_TO_FILE", "false")

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vehicle_booking.database import create_tables, get_db
from vehicle_booking.main import create_app
from vehicle_booking.models.user import User
from vehicle_booking.services.seed_service import seed_demo_data
from vehicle_booking.services.session_store import SessionStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db):
    seed_demo_data(db)
    return db


@pytest.fixture
def users(seeded):
    """Seeded users keyed by short name."""
    by_email = {u.email.split("@")[0]: u for u in seeded.query(User).all()}
    return {
        "admin": by_email["admin"],
        "l1": by_email["john.supervisor"],
        "l2": by_email["sarah.manager"],
        "mike": by_email["mike.employee"],
        "lisa": by_email["lisa.worker"],
    }


@pytest.fixture
def window():
    """A two-hour slot starting tomorrow at 08:00 UTC."""
    start = (datetime.utcnow() + timedelta(days=1)).replace(hour=8, minute=0, second=0, microsecond=0)
    return start, start + timedelta(hours=2)


@pytest.fixture
def sessions():
    return SessionStore(ttl=timedelta(hours=1))


@pytest.fixture
def client(seeded, session_factory, sessions):
    app = create_app(session_store=sessions)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def login(client):
    """login("admin@miningcompany.com", "admin123") -> Authorization header dict."""
    def _login(email, password):
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}
    return _login
