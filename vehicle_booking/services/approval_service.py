# vehicle_booking/services/approval_service.py
"""
Two-level approval chain.

Every booking has exactly two approvals, signed off in order:
  - level 1 approve  → booking stays pending until level 2 decides
  - level 1 reject   → level 2 is cancelled, booking rejected
  - level 2 approve  → booking approved (only once level 1 is approved)
  - level 2 reject   → booking rejected
A resolved approval is final. Booking.status is recomputed from the pair
after every change (derive_booking_status) and never written on its own.
"""

from datetime import datetime
from sqlalchemy import or_
from sqlalchemy.orm import Session
from vehicle_booking.errors import ForbiddenError, InternalError, InvalidStateError, NotFoundError, ValidationError
from vehicle_booking.models.approval import Approval, ApprovalChain, ApprovalStatus, APPROVAL_LEVELS
from vehicle_booking.models.booking import Booking, BookingStatus
from vehicle_booking.models.user import User
from vehicle_booking.permissions import Action, approver_level, is_allowed
from vehicle_booking.services.audit_service import log_activity
from vehicle_booking.utils.pagination import PageParams, paginate
from vehicle_booking.utils.logger import get_logger

logger = get_logger(__name__)

APPROVE = "approve"
REJECT = "reject"

_DECISION_STATUS = {
    APPROVE: ApprovalStatus.APPROVED.value,
    REJECT: ApprovalStatus.REJECTED.value,
}


def derive_booking_status(chain: ApprovalChain) -> str:
    """Booking status as a pure function of its level-1 and level-2 approval statuses."""
    l1, l2 = chain.level1.status, chain.level2.status
    if ApprovalStatus.REJECTED.value in (l1, l2):
        return BookingStatus.REJECTED.value
    if l1 == l2 == ApprovalStatus.CANCELLED.value:
        return BookingStatus.CANCELLED.value
    if l1 == l2 == ApprovalStatus.APPROVED.value:
        return BookingStatus.APPROVED.value
    return BookingStatus.PENDING.value


def approval_chain(booking: Booking) -> ApprovalChain:
    try:
        return ApprovalChain.from_approvals(booking.approvals)
    except ValueError as e:
        logger.error(f"Booking {booking.id} has a broken approval chain: {e}")
        raise InternalError()


def sync_booking_status(booking: Booking) -> str:
    """Recompute booking.status from its approvals. Returns the new status."""
    booking.status = derive_booking_status(approval_chain(booking))
    return booking.status


def _transition(db: Session, approval_id: int, from_statuses, values: dict) -> int:
    """Compare-and-set update on one approval row. Returns the number of rows changed."""
    values = dict(values, updated_at=datetime.utcnow())
    return (
        db.query(Approval)
        .filter(Approval.id == approval_id, Approval.status.in_(from_statuses))
        .update(values, synchronize_session=False)
    )


def _check_designated(approval: Approval, approver: User):
    if not is_allowed(approver.role, Action.RESOLVE_APPROVAL):
        raise ForbiddenError("Your role cannot resolve approvals")
    if approver_level(approver.role) != approval.level:
        raise ForbiddenError("You do not have permission to approve at this level")
    if approval.approver_id is not None and approval.approver_id != approver.id:
        raise ForbiddenError("You are not the designated approver for this booking")


async def resolve_approval(db: Session, booking_id: int, level: int, approver: User,
                           decision: str, comments: str = None) -> Booking:
    """Approve or reject the booking's approval at the given level."""
    if decision not in _DECISION_STATUS:
        raise ValidationError("decision must be 'approve' or 'reject'")
    if level not in APPROVAL_LEVELS:
        raise NotFoundError(f"Approval level {level} not found")

    # Row lock serialises concurrent resolutions/cancellations of the same booking
    booking = db.query(Booking).filter(Booking.id == booking_id).with_for_update().first()
    if not booking:
        raise NotFoundError("Booking not found")

    chain = approval_chain(booking)
    approval = chain.at(level)
    _check_designated(approval, approver)

    if approval.status != ApprovalStatus.PENDING.value:
        raise InvalidStateError("This approval has already been processed")
    if level == 2 and chain.level1.status != ApprovalStatus.APPROVED.value:
        raise InvalidStateError("Level 1 approval must be approved before level 2")

    new_status = _DECISION_STATUS[decision]
    changed = _transition(db, approval.id, [ApprovalStatus.PENDING.value], {
        "status": new_status,
        "comments": comments,
        "approver_id": approver.id,
        "decided_at": datetime.utcnow(),
    })
    if changed != 1:
        db.rollback()
        raise InvalidStateError("This approval has already been processed")

    if level == 1 and decision == REJECT:
        cascade_comment = "Cancelled due to Level 1 rejection"
        db.query(Approval).filter(Approval.booking_id == booking.id, Approval.level == 2).update(
            {"status": ApprovalStatus.CANCELLED.value, "comments": cascade_comment,
             "updated_at": datetime.utcnow()},
            synchronize_session=False,
        )

    for a in chain:
        db.refresh(a)

    old_booking_status = booking.status
    new_booking_status = sync_booking_status(booking)
    if new_booking_status == BookingStatus.REJECTED.value:
        booking.rejection_reason = comments or f"Rejected at level {level} approval"

    await log_activity(db, approver.id, "UPDATE", "approval", approval.id,
                       {"status": ApprovalStatus.PENDING.value},
                       {"status": new_status, "comments": comments, "approver_id": approver.id},
                       f"Approval {new_status} at level {level}")
    if new_booking_status != old_booking_status:
        await log_activity(db, approver.id, "UPDATE", "booking", booking.id,
                           {"status": old_booking_status}, {"status": new_booking_status},
                           f"Booking {new_booking_status} at level {level} approval")

    db.commit()
    db.refresh(booking)
    logger.info(
        f"Booking {booking.id}: level {level} {new_status} by {approver.email} "
        f"→ booking {old_booking_status} → {new_booking_status}"
    )
    return booking


def list_approvals(db: Session, approver: User, params: PageParams, status: str = None) -> dict:
    """Approval queue for the caller's level: rows designated to them or still unassigned."""
    if not is_allowed(approver.role, Action.READ_APPROVALS):
        raise ForbiddenError("Your role cannot view approvals")
    level = approver_level(approver.role)
    q = db.query(Approval).filter(
        Approval.level == level,
        or_(Approval.approver_id == approver.id, Approval.approver_id.is_(None)),
    )
    if status:
        q = q.filter(Approval.status == status)
    return paginate(q.order_by(Approval.created_at.desc(), Approval.id.desc()), params)
