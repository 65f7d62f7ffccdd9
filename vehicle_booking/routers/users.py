# vehicle_booking/routers/users.py
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from vehicle_booking.database import get_db
from vehicle_booking.dependencies import get_session_store, page_params, require
from vehicle_booking.models.user import Role, User, UserStatus
from vehicle_booking.permissions import Action
from vehicle_booking.schemas.pagination import Page
from vehicle_booking.schemas.user import UserCreate, UserOut, UserUpdate
from vehicle_booking.services import user_service
from vehicle_booking.services.session_store import SessionStore
from vehicle_booking.utils.pagination import PageParams

router = APIRouter()


@router.get("/users", response_model=Page[UserOut], summary="List users (admin)")
def list_users(role: Optional[Role] = None, status: Optional[UserStatus] = None,
               params: PageParams = Depends(page_params),
               user: User = Depends(require(Action.MANAGE_USERS)),
               db: Session = Depends(get_db)):
    return user_service.list_users(db, params, role=role.value if role else None,
                                   status=status.value if status else None)


@router.post("/users", response_model=UserOut, status_code=201, summary="Create a user (admin)")
async def create_user(body: UserCreate, user: User = Depends(require(Action.MANAGE_USERS)),
                      db: Session = Depends(get_db)):
    return await user_service.create_user(db, body.model_dump(), user.id)


@router.get("/users/{user_id}", response_model=UserOut, summary="Get one user (admin)")
def get_user(user_id: int, user: User = Depends(require(Action.MANAGE_USERS)),
             db: Session = Depends(get_db)):
    return user_service.get_user(db, user_id)


@router.put("/users/{user_id}", response_model=UserOut, summary="Update a user (admin)")
async def update_user(user_id: int, body: UserUpdate,
                      user: User = Depends(require(Action.MANAGE_USERS)),
                      db: Session = Depends(get_db),
                      sessions: SessionStore = Depends(get_session_store)):
    """Partial update. A new password is re-hashed; deactivation revokes the user's sessions."""
    return await user_service.update_user(db, sessions, user_id, body.model_dump(exclude_unset=True), user.id)
