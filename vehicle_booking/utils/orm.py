# vehicle_booking/utils/orm.py
"""Small helpers shared by the services that update ORM rows in place."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from vehicle_booking.errors import ConflictError


def apply_changes(obj, changes: dict) -> dict:
    """Set each attribute in changes on obj. Returns the previous values."""
    old = {}
    for key, value in changes.items():
        old[key] = getattr(obj, key)
        setattr(obj, key, value)
    return old


def flush_unique(db: Session, message: str):
    """Flush pending rows; a unique-constraint violation becomes ConflictError(message)."""
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError(message)
