"""Error hierarchy shared by every blog API layer.

Every error carries a user-facing message, the HTTP status it maps to and
optional extra fields merged into the JSON error body. Handlers in
``error_handlers`` turn them into ``{"message": ..., **extra}`` responses.
"""

from typing import Any, Optional

from fastapi import status


class BlogError(Exception):
    """Base class for all expected failures raised by the domain layer."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, extra: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_response(self) -> dict[str, Any]:
        return {"message": self.message, **self.extra}


class ValidationError(BlogError):
    """Missing or invalid input, or a reference that does not resolve."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(BlogError):
    """Uniqueness violation, or a delete blocked by dependent records."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BlogError):
    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(BlogError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(BlogError):
    status_code = status.HTTP_403_FORBIDDEN


class InternalError(BlogError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class MissingToken(UnauthorizedError):
    def __init__(self, message: str = "Access token is required"):
        super().__init__(message)


class InvalidToken(ForbiddenError):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class StorageError(InternalError):
    """The JSON document could not be read or written."""
