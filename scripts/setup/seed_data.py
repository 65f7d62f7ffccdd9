"""
Seed demo users, vehicles and drivers.
Existing rows (matched by email / plate / license) are left alone.
Usage: python scripts/setup/seed_data.py [--reset]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from vehicle_booking.database import Base, SessionLocal, create_tables, engine
from vehicle_booking.services.seed_service import DEMO_USERS, seed_demo_data


def main():
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first (destroys data)")
    args = parser.parse_args()

    if args.reset:
        print("⚠️  Dropping all tables...")
        import vehicle_booking.models  # noqa
        Base.metadata.drop_all(bind=engine)
    create_tables()

    db = SessionLocal()
    try:
        created = seed_demo_data(db)
    finally:
        db.close()

    print(f"✅ Created {created['users']} users, {created['vehicles']} vehicles, {created['drivers']} drivers")
    print("\nDefault Login Credentials:")
    for user in DEMO_USERS:
        print(f"  {user['role']:<12} {user['email']} / {user['password']}")


if __name__ == "__main__":
    main()
