# vehicle_booking/routers/bookings.py
"""
Booking endpoints: list, create, view, edit, cancel, and the two-level approval
sign-off addressed as /bookings/{id}/approvals/{level}.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from vehicle_booking.database import get_db
from vehicle_booking.dependencies import page_params, require
from vehicle_booking.models.booking import BookingStatus
from vehicle_booking.models.user import User
from vehicle_booking.permissions import Action
from vehicle_booking.schemas.booking import (
    ApprovalDecision, BookingCancel, BookingCreate, BookingOut, BookingUpdate, to_naive_utc,
)
from vehicle_booking.schemas.pagination import Page
from vehicle_booking.services import approval_service, booking_service
from vehicle_booking.utils.pagination import PageParams

router = APIRouter()


@router.get("/bookings", response_model=Page[BookingOut], summary="List bookings visible to the caller")
def list_bookings(
    status: Optional[BookingStatus] = None,
    vehicle_id: Optional[int] = None,
    driver_id: Optional[int] = None,
    user_id: Optional[int] = None,
    start_from: Optional[datetime] = None,
    end_until: Optional[datetime] = None,
    params: PageParams = Depends(page_params),
    user: User = Depends(require(Action.READ_BOOKINGS)),
    db: Session = Depends(get_db),
):
    """
    Admins see every booking (optionally filtered by user_id).
    Approvers see their own bookings plus those they are designated to approve.
    Employees see their own bookings.
    """
    return booking_service.list_bookings(
        db, user, params,
        status=status.value if status else None,
        vehicle_id=vehicle_id, driver_id=driver_id, user_id=user_id,
        start_from=to_naive_utc(start_from), end_until=to_naive_utc(end_until),
    )


@router.post("/bookings", response_model=BookingOut, status_code=201, summary="Create a booking")
async def create_booking(body: BookingCreate, user: User = Depends(require(Action.CREATE_BOOKING)),
                         db: Session = Depends(get_db)):
    """Creates the booking with pending level-1 and level-2 approvals."""
    return await booking_service.create_booking(
        db, user,
        vehicle_id=body.vehicle_id,
        driver_id=body.driver_id,
        start_date=body.start_date,
        end_date=body.end_date,
        notes=body.notes,
        department=body.department,
        user_id=body.user_id,
        approver_l1_id=body.approver_l1_id,
        approver_l2_id=body.approver_l2_id,
    )


@router.get("/bookings/{booking_id}", response_model=BookingOut, summary="Get one booking")
def get_booking(booking_id: int, user: User = Depends(require(Action.READ_BOOKINGS)),
                db: Session = Depends(get_db)):
    return booking_service.get_booking(db, booking_id, user)


@router.put("/bookings/{booking_id}", response_model=BookingOut, summary="Edit a booking")
async def update_booking(booking_id: int, body: BookingUpdate,
                         user: User = Depends(require(Action.UPDATE_BOOKING)),
                         db: Session = Depends(get_db)):
    """Owners edit their own pending bookings; admins edit any pending or approved booking."""
    return await booking_service.update_booking(db, booking_id, user, body.model_dump(exclude_unset=True))


@router.patch("/bookings/{booking_id}/approvals/{level}", response_model=BookingOut,
              summary="Approve or reject a booking at level 1 or 2")
async def resolve_approval(body: ApprovalDecision, booking_id: int, level: int = Path(ge=1, le=2),
                           user: User = Depends(require(Action.RESOLVE_APPROVAL)),
                           db: Session = Depends(get_db)):
    """Only the designated approver for the level may decide; decisions are final."""
    return await approval_service.resolve_approval(db, booking_id, level, user, body.decision, body.comments)


@router.patch("/bookings/{booking_id}/cancel", response_model=BookingOut, summary="Cancel a pending booking")
async def cancel_booking(booking_id: int, body: Optional[BookingCancel] = None,
                         user: User = Depends(require(Action.CANCEL_BOOKING)),
                         db: Session = Depends(get_db)):
    reason = body.reason if body else None
    return await booking_service.cancel_booking(db, booking_id, user, reason)
