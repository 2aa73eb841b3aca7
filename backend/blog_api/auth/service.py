import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..database import RecordStore
from ..errors import InvalidToken
from ..users import service as user_service
from ..users.models import User
from .schema import TokenClaims

logger = logging.getLogger(__name__)


def create_access_token(user: User) -> str:
    """
    Issue a signed access token for ``user``.

    The token embeds the identity fields needed by the authorization guard
    (id, username, role) and expires after ``ACCESS_TOKEN_EXPIRE_HOURS``.
    """
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)
    to_encode = {
        "id": user.id,
        "username": user.username,
        "role": user.role.value,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify signature and expiry and return the embedded claims.
    Raises ``InvalidToken`` for tampered, expired or malformed tokens.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        raise InvalidToken() from e
    try:
        return TokenClaims.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning("Rejected access token with malformed claims")
        raise InvalidToken() from e


async def authenticate_user(store: RecordStore, username: str, password: str) -> Optional[User]:
    """
    Check a username/password pair.
    Returns the user on success and ``None`` otherwise, without revealing
    which of the two was wrong.
    """
    user = user_service.get_user_by_username(username, store)
    if not user or not await user_service.verify_password(password, user.password):
        return None
    return user
