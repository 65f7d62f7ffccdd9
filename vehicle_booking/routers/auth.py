# vehicle_booking/routers/auth.py
"""Login, token verification, logout and the caller's own profile."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from vehicle_booking.database import get_db
from vehicle_booking.dependencies import get_bearer_token, get_current_user, get_session_store
from vehicle_booking.models.user import User
from vehicle_booking.schemas.auth import LoginRequest, LoginResponse, VerifyTokenResponse
from vehicle_booking.schemas.user import UserOut
from vehicle_booking.services import auth_service
from vehicle_booking.services.session_store import SessionStore

router = APIRouter()


@router.post("/auth/login", response_model=LoginResponse, summary="Log in and receive a bearer token")
async def login(body: LoginRequest, db: Session = Depends(get_db),
                sessions: SessionStore = Depends(get_session_store)):
    return await auth_service.login(db, sessions, body.email, body.password)


@router.get("/auth/verify-token", response_model=VerifyTokenResponse, summary="Validate the bearer token")
def verify_token(user: User = Depends(get_current_user)):
    return {"valid": True, "user": auth_service.user_profile(user)}


@router.post("/auth/logout", summary="Revoke the bearer token")
async def logout(token: str = Depends(get_bearer_token), user: User = Depends(get_current_user),
                 db: Session = Depends(get_db), sessions: SessionStore = Depends(get_session_store)):
    await auth_service.logout(db, sessions, token, user)
    return {"status": "logged_out"}


@router.get("/auth/profile", response_model=UserOut, summary="Current user's profile")
def profile(user: User = Depends(get_current_user)):
    return user
