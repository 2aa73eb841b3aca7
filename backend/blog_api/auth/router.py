from typing import List

from fastapi import APIRouter, status

from ..database import StoreDep
from ..errors import NotFoundError, UnauthorizedError
from ..users import service as user_service
from ..users.schema import (
    LoginResponse,
    UserCreate,
    UserLogin,
    UserPublic,
    UserResponse,
    UserRoleUpdate,
)
from .dependencies import AdminUser, CurrentUser
from .schema import Identity
from .service import authenticate_user, create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, store: StoreDep):
    # self-registration always yields a regular user; admins come from `manage.py create-admin`
    user = await user_service.create_user(user_data, store)
    return {"message": "User registered successfully", "user": user}


@router.post("/login", response_model=LoginResponse)
async def login(credentials: UserLogin, store: StoreDep):
    user = await authenticate_user(store, credentials.username, credentials.password)
    if not user:
        raise UnauthorizedError("Invalid username or password")

    return {
        "message": "Login successful",
        "token": create_access_token(user=user),
        "user": user,
    }


@router.get("/profile", response_model=UserPublic)
async def profile(store: StoreDep, current_user: Identity = CurrentUser):
    user = user_service.get_user_by_id(current_user.id, store)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("/users", response_model=List[UserPublic])
async def list_users(store: StoreDep, admin: Identity = AdminUser):
    return user_service.get_users(store)


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    body: UserRoleUpdate,
    store: StoreDep,
    admin: Identity = AdminUser,
):
    user = await user_service.update_user_role(store, user_id=user_id, role=body.role, actor_id=admin.id)
    return {"message": "User role updated successfully", "user": user}


@router.delete("/users/{user_id}")
async def delete_user(user_id: str, store: StoreDep, admin: Identity = AdminUser):
    await user_service.delete_user_by_id(store, user_id=user_id, actor_id=admin.id)
    return {"message": "User deleted successfully"}
