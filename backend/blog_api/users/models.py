# backend/blog_api/users/models.py
from datetime import datetime
from enum import Enum as PyEnum

from pydantic import Field

from ..models import CustomModel, utcnow

USERS = "users"


class UserRole(str, PyEnum):
    USER = "user"
    ADMIN = "admin"


class User(CustomModel):
    id: str
    username: str
    email: str
    password: str  # bcrypt hash
    role: UserRole = UserRole.USER
    created_at: datetime = Field(default_factory=utcnow)
