# vehicle_booking/services/auth_service.py
"""
Login, token verification and logout.
Credential failures all raise AuthError with the same generic message so
callers cannot tell unknown emails from wrong passwords.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session
from vehicle_booking.errors import AuthError
from vehicle_booking.models.user import User
from vehicle_booking.services.audit_service import log_activity
from vehicle_booking.services.session_store import SessionStore
from vehicle_booking.utils.security import verify_password
from vehicle_booking.utils.logger import get_logger

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def user_profile(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "department": user.department,
    }


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


async def login(db: Session, sessions: SessionStore, email: str, password: str) -> dict:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash) or not user.is_active:
        logger.warning(f"Failed login attempt for {email}")
        raise AuthError(INVALID_CREDENTIALS)

    session = sessions.issue(user.id)
    await log_activity(db, user.id, "LOGIN", "user", user.id, description="User logged in")
    db.commit()
    logger.info(f"User {user.email} logged in (role={user.role})")
    return {
        "token": session.token,
        "token_type": "bearer",
        "expires_at": session.expires_at,
        "user": user_profile(user),
    }


def verify_token(db: Session, sessions: SessionStore, token: str) -> User:
    """Resolve a bearer token to its active user or raise AuthError."""
    if not token:
        raise AuthError("Access token required")
    session = sessions.resolve(token)
    if session is None:
        raise AuthError("Invalid or expired token")
    user = db.get(User, session.user_id)
    if user is None:
        sessions.revoke(token)
        raise AuthError("Invalid token - user not found")
    if not user.is_active:
        sessions.revoke(token)
        raise AuthError("Account is inactive")
    return user


async def logout(db: Session, sessions: SessionStore, token: str, user: User):
    sessions.revoke(token)
    await log_activity(db, user.id, "LOGOUT", "user", user.id, description="User logged out")
    db.commit()
    logger.info(f"User {user.email} logged out")
