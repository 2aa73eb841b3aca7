import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..database import StoreDep
from ..errors import ForbiddenError, InvalidToken, MissingToken
from ..users import service as user_service
from . import service as auth_service
from .schema import Identity

logger = logging.getLogger(__name__)

# auto_error is off so missing and malformed headers go through the error hierarchy
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    request: Request,
    store: StoreDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """
    Resolve the caller from the ``Authorization: Bearer`` header.

    Only a missing header or an empty token is a 401. Any other value that
    is not a valid bearer token (including other schemes such as ``Basic``)
    is rejected as an invalid token with 403.

    A token outlives the account it was issued for until it expires, so the
    user id is looked up in the store on every request.
    """
    if credentials is None or not credentials.credentials:
        _, _, token = (request.headers.get("Authorization") or "").partition(" ")
        if token.strip():
            raise InvalidToken()
        raise MissingToken()

    claims = auth_service.decode_access_token(credentials.credentials)

    if user_service.get_user_by_id(claims.id, store) is None:
        logger.warning(f"Token presented for deleted user id={claims.id}")
        raise ForbiddenError("User not found")
    return Identity(**claims.model_dump())


CurrentUser = Depends(get_current_identity)


def require_admin(
    current_user: Identity = CurrentUser
) -> Identity:
    """
    Allow the request only when the authenticated caller is an admin.
    Raises 403 Forbidden otherwise.
    """
    if not current_user.is_admin:
        raise ForbiddenError("Admin privileges required")
    return current_user


AdminUser = Depends(require_admin)


def ensure_owner_or_admin(owner_id: Optional[str], current_user: Identity) -> None:
    """Raise 403 unless the caller owns the resource or is an admin."""
    if current_user.is_admin:
        return
    if owner_id is None or owner_id != current_user.id:
        raise ForbiddenError("You do not have permission to modify this resource")
