import logging
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool
from passlib.context import CryptContext

from ..config import settings
from ..database import DuplicateRecordError, RecordStore, Table, create_id
from ..errors import ConflictError, NotFoundError, ValidationError
from .models import USERS, User, UserRole
from .schema import UserCreate

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def users_table(store: RecordStore) -> Table[User]:
    return store.table(USERS, User)


async def hash_password(password: str) -> str:
    # bcrypt is CPU-bound; keep it off the event loop
    return await run_in_threadpool(pwd_context.hash, password)


async def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return await run_in_threadpool(pwd_context.verify, plain_password, hashed_password)


def _ensure_unique(table: Table[User], username: str, email: str) -> None:
    if table.find_one(username=username):
        raise ConflictError("Username is already taken")
    if table.find_one(email=email):
        raise ConflictError("Email is already registered")


async def create_user(user_data: UserCreate, store: RecordStore, role: UserRole = UserRole.USER) -> User:
    table = users_table(store)
    _ensure_unique(table, user_data.username, user_data.email)

    hashed_password = await hash_password(user_data.password)
    db_user = User(
        id=create_id(),
        username=user_data.username,
        email=user_data.email,
        password=hashed_password,
        role=role,
    )
    try:
        user = await table.insert(db_user, unique_on=("username", "email"))
    except DuplicateRecordError as e:
        # another registration won the race while we were hashing
        raise ConflictError(f"{e.field.capitalize()} is already registered") from e
    logger.info(f"Created user {user.username!r} (id={user.id}, role={user.role.value})")
    return user


def get_users(store: RecordStore) -> List[User]:
    return users_table(store).all()


def get_user_by_id(user_id: str, store: RecordStore) -> Optional[User]:
    return users_table(store).find_one(id=user_id)


def get_user_by_username(username: str, store: RecordStore) -> Optional[User]:
    return users_table(store).find_one(username=username)


async def update_user_role(store: RecordStore, *, user_id: str, role: UserRole, actor_id: str) -> User:
    """Change another user's role. Admins can never change their own."""
    user = get_user_by_id(user_id, store)
    if user is None:
        raise NotFoundError("User not found")
    if user_id == actor_id:
        raise ValidationError("You cannot change your own role")

    updated = await users_table(store).update({"role": role}, id=user_id)
    if updated is None:
        raise NotFoundError("User not found")
    logger.info(f"User {user_id} role changed to {role.value} by {actor_id}")
    return updated


async def delete_user_by_id(store: RecordStore, *, user_id: str, actor_id: str) -> None:
    """Delete another user's account. Admins can never delete themselves."""
    user = get_user_by_id(user_id, store)
    if user is None:
        raise NotFoundError("User not found")
    if user_id == actor_id:
        raise ValidationError("You cannot delete your own account")

    await users_table(store).remove(id=user_id)
    logger.info(f"User {user_id} deleted by {actor_id}")
