# vehicle_booking/routers/vehicles.py
"""Vehicle inventory: list/view for everyone, create/update for admins."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from vehicle_booking.database import get_db
from vehicle_booking.dependencies import page_params, require
from vehicle_booking.models.user import User
from vehicle_booking.models.vehicle import VehicleStatus, VehicleType
from vehicle_booking.permissions import Action
from vehicle_booking.schemas.pagination import Page
from vehicle_booking.schemas.vehicle import VehicleCreate, VehicleOut, VehicleUpdate
from vehicle_booking.services import vehicle_service
from vehicle_booking.utils.pagination import PageParams

router = APIRouter()


@router.get("/vehicles", response_model=Page[VehicleOut], summary="List vehicles")
def list_vehicles(status: Optional[VehicleStatus] = None, type: Optional[VehicleType] = None,
                  params: PageParams = Depends(page_params),
                  user: User = Depends(require(Action.READ_FLEET)),
                  db: Session = Depends(get_db)):
    return vehicle_service.list_vehicles(
        db, params,
        status=status.value if status else None,
        vehicle_type=type.value if type else None,
    )


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Get one vehicle")
def get_vehicle(vehicle_id: int, user: User = Depends(require(Action.READ_FLEET)),
                db: Session = Depends(get_db)):
    return vehicle_service.get_vehicle(db, vehicle_id)


@router.post("/vehicles", response_model=VehicleOut, status_code=201, summary="Register a vehicle")
async def create_vehicle(body: VehicleCreate, user: User = Depends(require(Action.MANAGE_FLEET)),
                         db: Session = Depends(get_db)):
    return await vehicle_service.create_vehicle(db, body.model_dump(), user.id)


@router.put("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Update a vehicle")
async def update_vehicle(vehicle_id: int, body: VehicleUpdate,
                         user: User = Depends(require(Action.MANAGE_FLEET)),
                         db: Session = Depends(get_db)):
    """Partial update: only fields present in the body are changed."""
    return await vehicle_service.update_vehicle(db, vehicle_id, body.model_dump(exclude_unset=True), user.id)
