# vehicle_booking/services/audit_service.py
"""
Shared audit logging service.
Used by the booking, approval, fleet, user and auth flows.
Rows are added to the caller's session; the caller commits them together
with the change they describe.
"""

from datetime import datetime
from sqlalchemy.orm import Session
from vehicle_booking.models.audit_log import AuditLog
from vehicle_booking.utils.logger import AUDIT_LOGGER, get_logger

logger = get_logger(AUDIT_LOGGER)


async def log_activity(db: Session, user_id, action, entity_type, entity_id,
                       old_values=None, new_values=None, description=None):
    """Stage an audit row on db. Does not commit."""
    db.add(AuditLog(user_id=user_id, action=action, entity_type=entity_type,
                    entity_id=entity_id, old_values=_jsonable(old_values),
                    new_values=_jsonable(new_values), description=description,
                    created_at=datetime.utcnow()))
    logger.info(f"[AUDIT][{action}] {entity_type}:{entity_id} by user {user_id}: {description or ''}")


def _jsonable(values):
    if values is None:
        return None
    out = {}
    for key, value in values.items():
        if isinstance(value, datetime):
            value = value.isoformat()
        elif hasattr(value, "value"):   # str enums
            value = value.value
        out[key] = value
    return out
