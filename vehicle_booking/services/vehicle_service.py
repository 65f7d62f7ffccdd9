# vehicle_booking/services/vehicle_service.py
"""
Vehicle and driver lookup and management helpers.
Used by the booking service and the vehicles/drivers routers.
"""

from sqlalchemy.orm import Session
from vehicle_booking.errors import ConflictError, NotFoundError
from vehicle_booking.models.driver import Driver
from vehicle_booking.models.vehicle import Vehicle
from vehicle_booking.services.audit_service import log_activity
from vehicle_booking.utils.pagination import PageParams, paginate
from vehicle_booking.utils.orm import apply_changes, flush_unique
from vehicle_booking.utils.logger import get_logger

logger = get_logger(__name__)


def lookup_vehicle_by_plate(db: Session, plate_number: str):
    """Find a vehicle by plate number. Returns None if not found."""
    return db.query(Vehicle).filter(Vehicle.plate_number == plate_number).first()


def get_vehicle(db: Session, vehicle_id: int, lock: bool = False) -> Vehicle:
    q = db.query(Vehicle).filter(Vehicle.id == vehicle_id)
    if lock:
        q = q.with_for_update()
    vehicle = q.first()
    if not vehicle:
        raise NotFoundError("Vehicle not found")
    return vehicle


def get_driver(db: Session, driver_id: int, lock: bool = False) -> Driver:
    q = db.query(Driver).filter(Driver.id == driver_id)
    if lock:
        q = q.with_for_update()
    driver = q.first()
    if not driver:
        raise NotFoundError("Driver not found")
    return driver


def list_vehicles(db: Session, params: PageParams, status: str = None, vehicle_type: str = None) -> dict:
    q = db.query(Vehicle)
    if status:
        q = q.filter(Vehicle.status == status)
    if vehicle_type:
        q = q.filter(Vehicle.type == vehicle_type)
    return paginate(q.order_by(Vehicle.plate_number.asc()), params)


def list_drivers(db: Session, status: str = None, vehicle_type: str = None) -> list:
    q = db.query(Driver)
    if status:
        q = q.filter(Driver.status == status)
    drivers = q.order_by(Driver.name.asc()).all()
    if vehicle_type:
        # vehicle_types is a JSON list; filtered here to stay portable across SQLite/PostgreSQL
        drivers = [d for d in drivers if d.can_drive(vehicle_type)]
    return drivers


async def create_vehicle(db: Session, data: dict, actor_id: int) -> Vehicle:
    if lookup_vehicle_by_plate(db, data["plate_number"]):
        raise ConflictError(f"Vehicle with plate {data['plate_number']} already exists")
    vehicle = Vehicle(**data)
    db.add(vehicle)
    flush_unique(db, f"Vehicle with plate {data['plate_number']} already exists")
    await log_activity(db, actor_id, "CREATE", "vehicle", vehicle.id, None, data, "Vehicle created")
    db.commit()
    db.refresh(vehicle)
    logger.info(f"Vehicle {vehicle.plate_number} registered (id={vehicle.id})")
    return vehicle


async def update_vehicle(db: Session, vehicle_id: int, changes: dict, actor_id: int) -> Vehicle:
    vehicle = get_vehicle(db, vehicle_id)
    plate = changes.get("plate_number")
    if plate and plate != vehicle.plate_number and lookup_vehicle_by_plate(db, plate):
        raise ConflictError(f"Vehicle with plate {plate} already exists")
    old = apply_changes(vehicle, changes)
    flush_unique(db, "Vehicle plate number already in use")
    await log_activity(db, actor_id, "UPDATE", "vehicle", vehicle.id, old, changes, "Vehicle updated")
    db.commit()
    db.refresh(vehicle)
    return vehicle


async def create_driver(db: Session, data: dict, actor_id: int) -> Driver:
    if db.query(Driver).filter(Driver.license_number == data["license_number"]).first():
        raise ConflictError(f"Driver with license {data['license_number']} already exists")
    driver = Driver(**data)
    db.add(driver)
    flush_unique(db, f"Driver with license {data['license_number']} already exists")
    await log_activity(db, actor_id, "CREATE", "driver", driver.id, None, data, "Driver created")
    db.commit()
    db.refresh(driver)
    logger.info(f"Driver {driver.name} registered (id={driver.id})")
    return driver


async def update_driver(db: Session, driver_id: int, changes: dict, actor_id: int) -> Driver:
    driver = get_driver(db, driver_id)
    license_number = changes.get("license_number")
    if license_number and license_number != driver.license_number and \
            db.query(Driver).filter(Driver.license_number == license_number).first():
        raise ConflictError(f"Driver with license {license_number} already exists")
    old = apply_changes(driver, changes)
    flush_unique(db, "Driver license number already in use")
    await log_activity(db, actor_id, "UPDATE", "driver", driver.id, old, changes, "Driver updated")
    db.commit()
    db.refresh(driver)
    return driver
