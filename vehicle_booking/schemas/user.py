# vehicle_booking/schemas/user.py
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from vehicle_booking.models.user import Role, UserStatus


class UserSummary(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class UserProfile(UserSummary):
    role: str
    department: Optional[str]


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    role: Role = Role.EMPLOYEE
    department: Optional[str] = None
    phone: Optional[str] = None
    status: UserStatus = UserStatus.ACTIVE

    class Config:
        use_enum_values = True


class UserOut(UserProfile):
    phone: Optional[str]
    status: str
    created_at: Optional[datetime]


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    role: Optional[Role] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[UserStatus] = None

    class Config:
        use_enum_values = True
