# vehicle_booking/routers/drivers.py
"""Driver records: list/view for everyone, create/update for admins."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from vehicle_booking.database import get_db
from vehicle_booking.dependencies import require
from vehicle_booking.models.driver import DriverStatus
from vehicle_booking.models.user import User
from vehicle_booking.models.vehicle import VehicleType
from vehicle_booking.permissions import Action
from vehicle_booking.schemas.driver import DriverCreate, DriverOut, DriverUpdate
from vehicle_booking.services import vehicle_service

router = APIRouter()


@router.get("/drivers", response_model=list[DriverOut], summary="List drivers")
def list_drivers(status: Optional[DriverStatus] = None, vehicle_type: Optional[VehicleType] = None,
                 user: User = Depends(require(Action.READ_FLEET)),
                 db: Session = Depends(get_db)):
    """Ordered by name. vehicle_type keeps only drivers qualified for that type."""
    return vehicle_service.list_drivers(
        db,
        status=status.value if status else None,
        vehicle_type=vehicle_type.value if vehicle_type else None,
    )


@router.get("/drivers/{driver_id}", response_model=DriverOut, summary="Get one driver")
def get_driver(driver_id: int, user: User = Depends(require(Action.READ_FLEET)),
               db: Session = Depends(get_db)):
    return vehicle_service.get_driver(db, driver_id)


@router.post("/drivers", response_model=DriverOut, status_code=201, summary="Register a driver")
async def create_driver(body: DriverCreate, user: User = Depends(require(Action.MANAGE_FLEET)),
                        db: Session = Depends(get_db)):
    return await vehicle_service.create_driver(db, body.model_dump(), user.id)


@router.put("/drivers/{driver_id}", response_model=DriverOut, summary="Update a driver")
async def update_driver(driver_id: int, body: DriverUpdate,
                        user: User = Depends(require(Action.MANAGE_FLEET)),
                        db: Session = Depends(get_db)):
    return await vehicle_service.update_driver(db, driver_id, body.model_dump(exclude_unset=True), user.id)
