"""
Create the booking schema and report what is in the database.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--seed]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from vehicle_booking.database import Base, SessionLocal, create_tables, engine
from vehicle_booking.config import settings
from vehicle_booking.services.seed_service import DEPRECATED_TABLES, seed_demo_data
from sqlalchemy import inspect, text


def check_connection():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        print(f"❌ Cannot connect to {engine.url.render_as_string(hide_password=True)}: {e}")
        if not settings.is_sqlite:
            print("   Is PostgreSQL running and DATABASE_URL correct?")
        sys.exit(1)
    print("✅ Database connection OK")


def main():
    parser = argparse.ArgumentParser(description="Create vehicle booking tables")
    parser.add_argument("--seed", action="store_true", help="Also insert demo users, vehicles and drivers")
    args = parser.parse_args()

    print("🗄️  Vehicle Booking DB Initialization")
    check_connection()

    create_tables()
    existing = set(inspect(engine).get_table_names())
    expected = set(Base.metadata.tables)
    missing = sorted(expected - existing)
    if missing:
        print(f"❌ Tables still missing after create_all: {', '.join(missing)}")
        sys.exit(1)
    print(f"✅ Booking schema ready: {', '.join(sorted(expected))}")

    leftovers = sorted(existing & set(DEPRECATED_TABLES))
    if leftovers:
        print(f"⚠️  Deprecated tables present ({', '.join(leftovers)}); "
              "run scripts/setup/remove_unused_tables.py")

    if args.seed:
        db = SessionLocal()
        try:
            created = seed_demo_data(db)
        finally:
            db.close()
        print(f"🌱 Seeded: {created}")

    print(f"\nStart with: uvicorn vehicle_booking.main:app --host {settings.BACKEND_HOST} "
          f"--port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
