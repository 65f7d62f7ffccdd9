# vehicle_booking/schemas/vehicle.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from vehicle_booking.models.vehicle import FuelType, VehicleStatus, VehicleType


class VehicleCreate(BaseModel):
    plate_number: str = Field(min_length=1, max_length=20)
    type: VehicleType
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(None, ge=1950, le=2100)
    capacity: Optional[str] = None          # "3.5 tons", "8 passengers"
    fuel_type: FuelType = FuelType.DIESEL
    status: VehicleStatus = VehicleStatus.AVAILABLE
    mileage: int = Field(0, ge=0)
    location: Optional[str] = None

    class Config:
        use_enum_values = True


class VehicleUpdate(BaseModel):
    plate_number: Optional[str] = Field(None, min_length=1, max_length=20)
    type: Optional[VehicleType] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(None, ge=1950, le=2100)
    capacity: Optional[str] = None
    fuel_type: Optional[FuelType] = None
    status: Optional[VehicleStatus] = None
    mileage: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None

    class Config:
        use_enum_values = True


class VehicleSummary(BaseModel):
    id: int
    plate_number: str
    type: str
    make: Optional[str]
    model: Optional[str]

    class Config:
        from_attributes = True


class VehicleOut(VehicleSummary):
    year: Optional[int]
    capacity: Optional[str]
    fuel_type: str
    status: str
    mileage: Optional[int]
    location: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
