# vehicle_booking/routers/audit_logs.py
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from vehicle_booking.database import get_db
from vehicle_booking.dependencies import page_params, require
from vehicle_booking.models.audit_log import AuditLog
from vehicle_booking.models.user import User
from vehicle_booking.permissions import Action
from vehicle_booking.schemas.audit_log import AuditLogOut
from vehicle_booking.schemas.pagination import Page
from vehicle_booking.utils.pagination import PageParams, paginate

router = APIRouter()


@router.get("/audit-logs", response_model=Page[AuditLogOut], summary="Audit trail: filterable by entity")
def get_audit_logs(
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    action: Optional[str] = None,
    user_id: Optional[int] = None,
    params: PageParams = Depends(page_params),
    user: User = Depends(require(Action.READ_AUDIT_LOGS)),
    db: Session = Depends(get_db),
):
    """Newest first."""
    q = db.query(AuditLog)
    if entity_type:
        q = q.filter(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        q = q.filter(AuditLog.entity_id == entity_id)
    if action:
        q = q.filter(AuditLog.action == action.upper())
    if user_id is not None:
        q = q.filter(AuditLog.user_id == user_id)
    return paginate(q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()), params)
