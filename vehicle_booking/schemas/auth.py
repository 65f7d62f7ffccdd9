# vehicle_booking/schemas/auth.py
from pydantic import BaseModel, EmailStr
from datetime import datetime
from vehicle_booking.schemas.user import UserProfile


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserProfile


class VerifyTokenResponse(BaseModel):
    valid: bool
    user: UserProfile
