# vehicle_booking/dependencies.py
"""
Shared FastAPI dependencies: session store, current user, permission
checks and pagination parameters.
"""

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from vehicle_booking.config import settings
from vehicle_booking.database import get_db
from vehicle_booking.errors import AuthError, ForbiddenError
from vehicle_booking.models.user import User
from vehicle_booking.permissions import Action, is_allowed
from vehicle_booking.services.auth_service import verify_token
from vehicle_booking.services.session_store import SessionStore
from vehicle_booking.utils.pagination import PageParams, validate_page_params
from vehicle_booking.utils.logger import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_bearer_token(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthError("Access token required")
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
) -> User:
    return verify_token(db, sessions, token)


def require(action: Action):
    """Dependency factory: the current user, provided their role allows action."""
    def checker(user: User = Depends(get_current_user)) -> User:
        if not is_allowed(user.role, action):
            logger.warning(f"Denied {action.value} for user {user.id} (role={user.role})")
            raise ForbiddenError(f"Insufficient permissions for {action.value}")
        return user
    return checker


def page_params(
    page: int = Query(1, description="1-based page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, description=f"Items per page (max {settings.MAX_PAGE_SIZE})"),
) -> PageParams:
    return validate_page_params(page, limit)
