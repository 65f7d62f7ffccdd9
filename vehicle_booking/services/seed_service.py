# vehicle_booking/services/seed_service.py
"""
Demo data seeding and deprecated-table cleanup.
Invoked out-of-band by scripts/setup/seed_data.py and
scripts/setup/remove_unused_tables.py; never called while serving requests.
"""

from datetime import datetime
from sqlalchemy import inspect, text
from sqlalchemy.orm import Session
from vehicle_booking.models.driver import Driver
from vehicle_booking.models.user import User
from vehicle_booking.models.vehicle import Vehicle
from vehicle_booking.utils.security import hash_password
from vehicle_booking.utils.logger import get_logger

logger = get_logger(__name__)

DEMO_USERS = [
    {"name": "System Admin", "email": "admin@miningcompany.com", "password": "admin123",
     "role": "admin", "department": "IT"},
    {"name": "John Supervisor", "email": "john.supervisor@miningcompany.com", "password": "approver123",
     "role": "approver_l1", "department": "Operations"},
    {"name": "Sarah Manager", "email": "sarah.manager@miningcompany.com", "password": "approver123",
     "role": "approver_l2", "department": "Management"},
    {"name": "Mike Employee", "email": "mike.employee@miningcompany.com", "password": "employee123",
     "role": "employee", "department": "Mining"},
    {"name": "Lisa Worker", "email": "lisa.worker@miningcompany.com", "password": "employee123",
     "role": "employee", "department": "Maintenance"},
]

DEMO_VEHICLES = [
    {"plate_number": "MIN-001", "type": "truck", "make": "Ford", "model": "F-350", "year": 2022,
     "capacity": "3.5 tons", "fuel_type": "diesel", "status": "available", "location": "Main Depot"},
    {"plate_number": "MIN-002", "type": "excavator", "make": "Caterpillar", "model": "320", "year": 2021,
     "capacity": "20 tons", "fuel_type": "diesel", "status": "available", "location": "Site A"},
    {"plate_number": "MIN-003", "type": "van", "make": "Toyota", "model": "Hiace", "year": 2023,
     "capacity": "8 passengers", "fuel_type": "petrol", "status": "available", "location": "Main Depot"},
    {"plate_number": "MIN-004", "type": "bulldozer", "make": "Komatsu", "model": "D65", "year": 2020,
     "capacity": "25 tons", "fuel_type": "diesel", "status": "maintenance", "location": "Workshop"},
    {"plate_number": "MIN-005", "type": "car", "make": "Toyota", "model": "Prado", "year": 2022,
     "capacity": "7 passengers", "fuel_type": "petrol", "status": "available", "location": "Main Depot"},
]

DEMO_DRIVERS = [
    {"name": "David Thompson", "license_number": "DL001234", "license_expiry": datetime(2027, 12, 31),
     "phone": "+1234567890", "email": "david.thompson@miningcompany.com", "status": "available",
     "experience_years": 10, "vehicle_types": ["truck", "van", "car"]},
    {"name": "Robert Miller", "license_number": "DL005678", "license_expiry": datetime(2027, 6, 30),
     "phone": "+1234567891", "email": "robert.miller@miningcompany.com", "status": "available",
     "experience_years": 15, "vehicle_types": ["excavator", "bulldozer", "crane"]},
    {"name": "Jennifer Davis", "license_number": "DL009012", "license_expiry": datetime(2028, 3, 15),
     "phone": "+1234567892", "email": "jennifer.davis@miningcompany.com", "status": "available",
     "experience_years": 8, "vehicle_types": ["truck", "van", "car", "bus"]},
    {"name": "Carlos Rodriguez", "license_number": "DL003456", "license_expiry": datetime(2027, 9, 20),
     "phone": "+1234567893", "email": "carlos.rodriguez@miningcompany.com", "status": "on_leave",
     "experience_years": 12, "vehicle_types": ["excavator", "bulldozer"]},
]

DEPRECATED_TABLES = ("fuel_logs", "service_logs")


def seed_demo_data(db: Session) -> dict:
    """
    Insert demo users, vehicles and drivers. Rows whose unique key already
    exists are left untouched, so running twice is harmless.
    Returns the number of rows created per entity.
    """
    created = {"users": 0, "vehicles": 0, "drivers": 0}

    for row in DEMO_USERS:
        if db.query(User).filter(User.email == row["email"]).first():
            continue
        data = dict(row)
        db.add(User(password_hash=hash_password(data.pop("password")), **data))
        created["users"] += 1

    for row in DEMO_VEHICLES:
        if db.query(Vehicle).filter(Vehicle.plate_number == row["plate_number"]).first():
            continue
        db.add(Vehicle(**row))
        created["vehicles"] += 1

    for row in DEMO_DRIVERS:
        if db.query(Driver).filter(Driver.license_number == row["license_number"]).first():
            continue
        db.add(Driver(**row))
        created["drivers"] += 1

    db.commit()
    logger.info(f"Seeded demo data: {created}")
    return created


def drop_deprecated_tables(engine) -> list:
    """Drop the retired fuel/service log tables if they exist. Returns the names dropped."""
    existing = set(inspect(engine).get_table_names())
    dropped = []
    with engine.begin() as conn:
        for table in DEPRECATED_TABLES:
            if table in existing:
                conn.execute(text(f"DROP TABLE {table}"))
                dropped.append(table)
                logger.info(f"Dropped deprecated table {table}")
    return dropped
