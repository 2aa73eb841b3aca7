from datetime import datetime

from pydantic import EmailStr, Field

from ..models import CustomModel
from .models import UserRole


class UserBase(CustomModel):
    username: str = Field(..., min_length=1, max_length=50, json_schema_extra={"example": "john"})
    email: EmailStr = Field(..., json_schema_extra={"example": "john@example.com"})


class UserCreate(UserBase):
    password: str = Field(..., min_length=1, json_schema_extra={"example": "strongpassword123"})


class UserLogin(CustomModel):
    username: str = Field(..., min_length=1, json_schema_extra={"example": "john"})
    password: str = Field(..., min_length=1, json_schema_extra={"example": "strongpassword123"})


class UserRoleUpdate(CustomModel):
    role: UserRole


class UserPublic(CustomModel):
    """User payload returned to clients; never carries the password hash."""
    id: str
    username: str
    email: str
    role: UserRole
    created_at: datetime


class UserResponse(CustomModel):
    message: str
    user: UserPublic


class LoginResponse(UserResponse):
    token: str
