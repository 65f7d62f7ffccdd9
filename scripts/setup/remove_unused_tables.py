"""
Drop the retired fuel_logs and service_logs tables.
Safe to run repeatedly; missing tables are skipped.
Usage: python scripts/setup/remove_unused_tables.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from vehicle_booking.database import engine
from vehicle_booking.services.seed_service import DEPRECATED_TABLES, drop_deprecated_tables


def main():
    print("🗑️  Starting cleanup of unused tables...")
    try:
        dropped = drop_deprecated_tables(engine)
    except Exception as e:
        print(f"❌ Cleanup failed: {e}")
        sys.exit(1)

    for table in DEPRECATED_TABLES:
        print(f"   {'✅ dropped' if table in dropped else '·  not present'}: {table}")
    print("🎉 Database cleanup completed")


if __name__ == "__main__":
    main()
