# vehicle_booking/schemas/driver.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from vehicle_booking.models.driver import DriverStatus
from vehicle_booking.models.vehicle import VehicleType


class DriverCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    license_number: str = Field(min_length=1, max_length=50)
    license_expiry: Optional[datetime] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    status: DriverStatus = DriverStatus.AVAILABLE
    experience_years: int = Field(0, ge=0)
    vehicle_types: List[VehicleType] = []   # empty = may drive any type

    class Config:
        use_enum_values = True


class DriverUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    license_number: Optional[str] = Field(None, min_length=1, max_length=50)
    license_expiry: Optional[datetime] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    status: Optional[DriverStatus] = None
    experience_years: Optional[int] = Field(None, ge=0)
    vehicle_types: Optional[List[VehicleType]] = None

    class Config:
        use_enum_values = True


class DriverSummary(BaseModel):
    id: int
    name: str
    license_number: str

    class Config:
        from_attributes = True


class DriverOut(DriverSummary):
    license_expiry: Optional[datetime]
    phone: Optional[str]
    email: Optional[str]
    status: str
    experience_years: Optional[int]
    vehicle_types: Optional[List[str]]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
