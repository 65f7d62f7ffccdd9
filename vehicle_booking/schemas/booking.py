# vehicle_booking/schemas/booking.py
from pydantic import AfterValidator, AliasChoices, BaseModel, Field
from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional
from vehicle_booking.schemas.driver import DriverSummary
from vehicle_booking.schemas.user import UserSummary
from vehicle_booking.schemas.vehicle import VehicleSummary


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC; aware inputs are converted."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]


class BookingCreate(BaseModel):
    vehicle_id: int
    driver_id: int
    start_date: UTCDateTime
    end_date: UTCDateTime
    notes: Optional[str] = Field(None, max_length=2000, validation_alias=AliasChoices("notes", "purpose"))
    department: Optional[str] = Field(None, max_length=100)
    user_id: Optional[int] = None           # admin booking on behalf of an employee
    approver_l1_id: Optional[int] = None
    approver_l2_id: Optional[int] = None


class BookingUpdate(BaseModel):
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    notes: Optional[str] = Field(None, max_length=2000, validation_alias=AliasChoices("notes", "purpose"))
    department: Optional[str] = Field(None, max_length=100)
    user_id: Optional[int] = None           # admin only: reassign the requester


class BookingCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class ApprovalDecision(BaseModel):
    decision: Literal["approve", "reject"]
    comments: Optional[str] = Field(None, max_length=1000)


class ApprovalOut(BaseModel):
    id: int
    booking_id: int
    approver_id: Optional[int]
    level: int
    status: str
    comments: Optional[str]
    decided_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class BookingOut(BaseModel):
    id: int
    user_id: int
    created_by: Optional[int]
    vehicle_id: int
    driver_id: int
    start_date: datetime
    end_date: datetime
    department: Optional[str]
    notes: Optional[str]
    status: str
    rejection_reason: Optional[str]
    cancellation_reason: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    approvals: List[ApprovalOut]
    user: Optional[UserSummary] = None
    vehicle: Optional[VehicleSummary] = None
    driver: Optional[DriverSummary] = None

    class Config:
        from_attributes = True
