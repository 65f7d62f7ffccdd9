# vehicle_booking/services/user_service.py
"""User management helpers (admin only)."""

from sqlalchemy.orm import Session
from vehicle_booking.errors import ConflictError, NotFoundError
from vehicle_booking.models.user import User, UserStatus
from vehicle_booking.services.audit_service import log_activity
from vehicle_booking.services.auth_service import get_user_by_email
from vehicle_booking.services.session_store import SessionStore
from vehicle_booking.utils.orm import apply_changes, flush_unique
from vehicle_booking.utils.pagination import PageParams, paginate
from vehicle_booking.utils.security import hash_password
from vehicle_booking.utils.logger import get_logger

logger = get_logger(__name__)


def list_users(db: Session, params: PageParams, role: str = None, status: str = None) -> dict:
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    if status:
        q = q.filter(User.status == status)
    return paginate(q.order_by(User.name.asc(), User.id.asc()), params)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def _check_email_free(db: Session, email: str, user_id: int = None):
    existing = get_user_by_email(db, email)
    if existing and existing.id != user_id:
        raise ConflictError(f"User with email {email} already exists")


async def create_user(db: Session, data: dict, actor_id: int) -> User:
    _check_email_free(db, data["email"])
    password = data.pop("password")
    user = User(password_hash=hash_password(password), **data)
    db.add(user)
    flush_unique(db, f"User with email {data['email']} already exists")
    await log_activity(db, actor_id, "CREATE", "user", user.id, None, data, "User created")
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.email} created with role {user.role}")
    return user


async def update_user(db: Session, sessions: SessionStore, user_id: int, changes: dict, actor_id: int) -> User:
    """
    Partial update of profile, role, status and password.
    Deactivating a user revokes all of their sessions.
    """
    user = get_user(db, user_id)
    password = changes.pop("password", None)
    changes = {k: v for k, v in changes.items() if v is not None and v != getattr(user, k)}
    if "email" in changes:
        _check_email_free(db, changes["email"], user.id)

    old = apply_changes(user, changes)
    audit_new = dict(changes)
    if password:
        user.password_hash = hash_password(password)
        audit_new["password_changed"] = True
    if not audit_new:
        return user

    flush_unique(db, "Email address already in use")
    await log_activity(db, actor_id, "UPDATE", "user", user.id, old, audit_new, "User updated")
    db.commit()
    db.refresh(user)

    if changes.get("status") == UserStatus.INACTIVE.value:
        revoked = sessions.revoke_user(user.id)
        logger.info(f"User {user.email} deactivated, {revoked} session(s) revoked")
    else:
        logger.info(f"User {user.email} updated: {sorted(audit_new)}")
    return user
