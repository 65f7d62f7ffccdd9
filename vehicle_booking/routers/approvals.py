# vehicle_booking/routers/approvals.py
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from vehicle_booking.database import get_db
from vehicle_booking.dependencies import page_params, require
from vehicle_booking.models.approval import ApprovalStatus
from vehicle_booking.models.user import User
from vehicle_booking.permissions import Action
from vehicle_booking.schemas.booking import ApprovalOut
from vehicle_booking.schemas.pagination import Page
from vehicle_booking.services import approval_service
from vehicle_booking.utils.pagination import PageParams

router = APIRouter()


@router.get("/approvals", response_model=Page[ApprovalOut], summary="Approval queue for the caller's level")
def list_approvals(status: Optional[ApprovalStatus] = None,
                   params: PageParams = Depends(page_params),
                   user: User = Depends(require(Action.READ_APPROVALS)),
                   db: Session = Depends(get_db)):
    """Newest first. Filter by status (pending, approved, rejected, cancelled)."""
    return approval_service.list_approvals(db, user, params, status=status.value if status else None)
