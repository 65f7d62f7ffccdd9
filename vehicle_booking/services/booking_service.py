# vehicle_booking/services/booking_service.py
"""
Booking creation, editing, cancellation and visibility rules.

Creating or editing a booking:
  1. validate the date range and the requester's right to book
  2. lock the vehicle and driver rows (SELECT ... FOR UPDATE)
  3. reject overlaps with any pending/approved booking on the same vehicle or driver
     (an edited booking is excluded from its own overlap check)
  4. write the booking, its approvals and the audit row in one commit
"""

from datetime import datetime
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from vehicle_booking.errors import ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from vehicle_booking.models.approval import Approval, ApprovalStatus, APPROVAL_LEVELS
from vehicle_booking.models.booking import Booking, BookingStatus, ACTIVE_BOOKING_STATUSES
from vehicle_booking.models.driver import UNBOOKABLE_DRIVER_STATUSES
from vehicle_booking.models.user import User, UserStatus
from vehicle_booking.models.vehicle import UNBOOKABLE_VEHICLE_STATUSES
from vehicle_booking.permissions import Action, LEVEL_ROLE, is_allowed
from vehicle_booking.services.approval_service import sync_booking_status
from vehicle_booking.services.audit_service import log_activity
from vehicle_booking.services.vehicle_service import get_driver, get_vehicle
from vehicle_booking.utils.pagination import PageParams, paginate
from vehicle_booking.utils.orm import apply_changes
from vehicle_booking.utils.logger import get_logger

logger = get_logger(__name__)


def find_overlapping_bookings(db: Session, start, end, vehicle_id=None, driver_id=None, exclude_id=None):
    """Active bookings on the vehicle or driver whose [start_date, end_date) intersects [start, end)."""
    resources = []
    if vehicle_id is not None:
        resources.append(Booking.vehicle_id == vehicle_id)
    if driver_id is not None:
        resources.append(Booking.driver_id == driver_id)
    if not resources:
        return []
    q = db.query(Booking).filter(
        or_(*resources),
        Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        Booking.start_date < end,
        Booking.end_date > start,
    )
    if exclude_id is not None:
        q = q.filter(Booking.id != exclude_id)
    return q.all()


def designate_approver(db: Session, level: int, approver_id: int = None) -> User:
    """
    Pick the approver for a level. An explicit approver_id must be an active
    user holding the level's role; otherwise the lowest-id active holder is used.
    """
    role = LEVEL_ROLE[level].value
    if approver_id is not None:
        approver = db.get(User, approver_id)
        if not approver or approver.role != role or approver.status != UserStatus.ACTIVE.value:
            raise ValidationError(f"Level {level} approver must be an active {role} user")
        return approver
    approver = (
        db.query(User)
        .filter(User.role == role, User.status == UserStatus.ACTIVE.value)
        .order_by(User.id.asc())
        .first()
    )
    if not approver:
        raise ValidationError(f"No {role} user available to approve level {level}")
    return approver


def _resolve_requester(db: Session, actor: User, user_id: int = None) -> User:
    if not is_allowed(actor.role, Action.CREATE_BOOKING):
        raise ForbiddenError("Your role cannot create bookings")
    if user_id is None or user_id == actor.id:
        return actor
    if not is_allowed(actor.role, Action.BOOK_FOR_OTHERS):
        raise ForbiddenError("You can only create bookings for yourself")
    requester = db.get(User, user_id)
    if not requester:
        raise NotFoundError("Employee not found")
    return requester


def _validate_dates(start_date, end_date, check_past: bool = True):
    if check_past and start_date < datetime.utcnow():
        raise ValidationError("Start date cannot be in the past")
    if end_date <= start_date:
        raise ValidationError("End date must be after start date")


def _lock_bookable(db: Session, vehicle_id: int, driver_id: int):
    """Lock the vehicle and driver rows and check they can take a booking."""
    vehicle = get_vehicle(db, vehicle_id, lock=True)
    driver = get_driver(db, driver_id, lock=True)
    if vehicle.status in UNBOOKABLE_VEHICLE_STATUSES:
        raise ConflictError(f"Vehicle {vehicle.plate_number} is currently {vehicle.status}")
    if driver.status in UNBOOKABLE_DRIVER_STATUSES:
        raise ConflictError(f"Driver {driver.name} is currently {driver.status}")
    if not driver.can_drive(vehicle.type):
        raise ValidationError(f"Driver {driver.name} is not qualified for vehicle type '{vehicle.type}'")
    return vehicle, driver


def _check_no_overlap(db: Session, start_date, end_date, vehicle, driver, exclude_id=None):
    overlapping = find_overlapping_bookings(db, start_date, end_date, vehicle_id=vehicle.id,
                                            driver_id=driver.id, exclude_id=exclude_id)
    if overlapping:
        clash = overlapping[0]
        what = "Vehicle" if clash.vehicle_id == vehicle.id else "Driver"
        logger.warning(
            f"Booking overlap: {what} already booked by booking {clash.id} "
            f"({clash.start_date.isoformat()} – {clash.end_date.isoformat()})"
        )
        raise ConflictError(f"{what} is already booked between {clash.start_date.isoformat()} "
                            f"and {clash.end_date.isoformat()}")


async def create_booking(db: Session, actor: User, vehicle_id: int, driver_id: int, start_date, end_date,
                         notes: str = None, department: str = None, user_id: int = None,
                         approver_l1_id: int = None, approver_l2_id: int = None) -> Booking:
    _validate_dates(start_date, end_date)
    requester = _resolve_requester(db, actor, user_id)
    vehicle, driver = _lock_bookable(db, vehicle_id, driver_id)
    _check_no_overlap(db, start_date, end_date, vehicle, driver)

    approvers = {
        1: designate_approver(db, 1, approver_l1_id),
        2: designate_approver(db, 2, approver_l2_id),
    }

    booking = Booking(
        user_id=requester.id,
        created_by=actor.id,
        vehicle_id=vehicle.id,
        driver_id=driver.id,
        start_date=start_date,
        end_date=end_date,
        department=department or requester.department,
        notes=notes,
        status=BookingStatus.PENDING.value,
    )
    booking.approvals = [
        Approval(level=level, approver_id=approvers[level].id, status=ApprovalStatus.PENDING.value)
        for level in APPROVAL_LEVELS
    ]
    sync_booking_status(booking)
    db.add(booking)
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Booking insert rejected by database: {e.orig}")
        raise ConflictError("Booking could not be created")

    await log_activity(db, actor.id, "CREATE", "booking", booking.id, None, {
        "user_id": requester.id,
        "vehicle_id": vehicle.id,
        "driver_id": driver.id,
        "start_date": start_date,
        "end_date": end_date,
        "approver_l1_id": approvers[1].id,
        "approver_l2_id": approvers[2].id,
    }, "Booking created")
    db.commit()
    db.refresh(booking)
    logger.info(
        f"Booking {booking.id} created for user {requester.id}: vehicle={vehicle.plate_number} "
        f"driver={driver.id} {start_date.isoformat()} → {end_date.isoformat()}"
    )
    return booking


EDITABLE_FIELDS = ("vehicle_id", "driver_id", "start_date", "end_date", "notes", "department", "user_id")


async def update_booking(db: Session, booking_id: int, actor: User, changes: dict) -> Booking:
    """
    Edit a booking's resource, dates, notes or requester.
    Owners may edit their own pending bookings; admins may edit any pending or
    approved booking. The approval chain is left as it is.
    """
    booking = db.query(Booking).filter(Booking.id == booking_id).with_for_update().first()
    if not booking:
        raise NotFoundError("Booking not found")

    edit_any = is_allowed(actor.role, Action.UPDATE_ANY_BOOKING)
    own = booking.user_id == actor.id and is_allowed(actor.role, Action.UPDATE_BOOKING)
    if not own and not edit_any:
        raise ForbiddenError("You can only edit your own bookings")
    editable = ACTIVE_BOOKING_STATUSES if edit_any else (BookingStatus.PENDING.value,)
    if booking.status not in editable:
        raise InvalidStateError(f"Booking is {booking.status} and can no longer be edited")

    changes = {
        key: value for key, value in changes.items()
        if key in EDITABLE_FIELDS and value is not None and value != getattr(booking, key)
    }
    if not changes:
        return booking

    if "user_id" in changes:
        _resolve_requester(db, actor, changes["user_id"])
    start_date = changes.get("start_date", booking.start_date)
    end_date = changes.get("end_date", booking.end_date)
    _validate_dates(start_date, end_date, check_past="start_date" in changes)
    vehicle, driver = _lock_bookable(db, changes.get("vehicle_id", booking.vehicle_id),
                                     changes.get("driver_id", booking.driver_id))
    _check_no_overlap(db, start_date, end_date, vehicle, driver, exclude_id=booking.id)

    old = apply_changes(booking, changes)
    await log_activity(db, actor.id, "UPDATE", "booking", booking.id, old, changes, "Booking updated")
    db.commit()
    db.refresh(booking)
    logger.info(f"Booking {booking.id} updated by user {actor.id}: {sorted(changes)}")
    return booking


async def cancel_booking(db: Session, booking_id: int, actor: User, reason: str = None) -> Booking:
    """Cancel a pending booking; both approvals become cancelled."""
    booking = db.query(Booking).filter(Booking.id == booking_id).with_for_update().first()
    if not booking:
        raise NotFoundError("Booking not found")

    own = booking.user_id == actor.id and is_allowed(actor.role, Action.CANCEL_BOOKING)
    if not own and not is_allowed(actor.role, Action.CANCEL_ANY_BOOKING):
        raise ForbiddenError("You can only cancel your own bookings")
    if booking.status != BookingStatus.PENDING.value:
        raise InvalidStateError(f"Only pending bookings can be cancelled (booking is {booking.status})")

    changed = (
        db.query(Approval)
        .filter(Approval.booking_id == booking.id,
                Approval.status.in_([ApprovalStatus.PENDING.value, ApprovalStatus.APPROVED.value]))
        .update({"status": ApprovalStatus.CANCELLED.value, "comments": reason or "Booking cancelled"},
                synchronize_session=False)
    )
    if changed == 0:
        db.rollback()
        raise InvalidStateError("Booking is no longer pending")
    for approval in booking.approvals:
        db.refresh(approval)

    old_status = booking.status
    booking.cancellation_reason = reason
    sync_booking_status(booking)
    await log_activity(db, actor.id, "CANCEL", "booking", booking.id,
                       {"status": old_status}, {"status": booking.status, "reason": reason},
                       "Booking cancelled")
    db.commit()
    db.refresh(booking)
    logger.info(f"Booking {booking.id} cancelled by user {actor.id}")
    return booking


def visible_bookings(db: Session, user: User):
    """Base query of the bookings a user may see."""
    q = db.query(Booking)
    if is_allowed(user.role, Action.READ_ALL_BOOKINGS):
        return q
    if not is_allowed(user.role, Action.READ_BOOKINGS):
        raise ForbiddenError("Your role cannot view bookings")
    if is_allowed(user.role, Action.READ_APPROVALS):
        assigned = select(Approval.booking_id).where(Approval.approver_id == user.id)
        return q.filter(or_(Booking.user_id == user.id, Booking.id.in_(assigned)))
    return q.filter(Booking.user_id == user.id)


def list_bookings(db: Session, user: User, params: PageParams, status: str = None, vehicle_id: int = None,
                  driver_id: int = None, user_id: int = None, start_from=None, end_until=None) -> dict:
    q = visible_bookings(db, user)
    if status:
        q = q.filter(Booking.status == status)
    if vehicle_id:
        q = q.filter(Booking.vehicle_id == vehicle_id)
    if driver_id:
        q = q.filter(Booking.driver_id == driver_id)
    if user_id:
        q = q.filter(Booking.user_id == user_id)
    if start_from:
        q = q.filter(Booking.start_date >= start_from)
    if end_until:
        q = q.filter(Booking.end_date <= end_until)
    return paginate(q.order_by(Booking.created_at.desc(), Booking.id.desc()), params)


def get_booking(db: Session, booking_id: int, user: User) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    if not visible_bookings(db, user).filter(Booking.id == booking_id).first():
        raise ForbiddenError("You can only view your own bookings or bookings you need to approve")
    return booking
