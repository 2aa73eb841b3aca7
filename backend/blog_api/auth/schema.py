from pydantic import BaseModel

from ..users.models import UserRole


class TokenClaims(BaseModel):
    """Identity fields carried by a verified access token."""
    id: str
    username: str
    role: UserRole


class Identity(TokenClaims):
    """The authenticated caller attached to a request."""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
