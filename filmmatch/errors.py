"""
Error taxonomy for FilmMatch core operations.

Error Taxonomy:
- NotFoundError: Referenced film/user/request/friendship does not exist or is soft-deleted
- UnauthenticatedError: No acting user could be resolved for the request
- ValidationError: Self friend request, duplicate pending request, malformed input
- ConflictError: Relationship already in a terminal or incompatible state
- OperationCancelledError: Caller cancelled the unit of work before commit
"""

from enum import Enum
from typing import Optional


class ErrorType(Enum):
    """Classification of core errors."""
    NOT_FOUND = "not_found"
    UNAUTHENTICATED = "unauthenticated"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    CANCELLED = "cancelled"


# HTTP status the boundary layer maps each error type to
HTTP_STATUS = {
    ErrorType.NOT_FOUND: 404,
    ErrorType.UNAUTHENTICATED: 401,
    ErrorType.VALIDATION: 400,
    ErrorType.CONFLICT: 409,
    ErrorType.CANCELLED: 499,
}


class FilmMatchError(Exception):
    """Base exception for all core errors."""

    def __init__(self, message: str, error_type: ErrorType, entity: Optional[str] = None):
        self.message = message
        self.error_type = error_type
        self.entity = entity
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.error_type]


class NotFoundError(FilmMatchError):
    """Referenced entity does not exist or is soft-deleted."""

    def __init__(self, message: str, entity: Optional[str] = None):
        super().__init__(message, ErrorType.NOT_FOUND, entity)


class UnauthenticatedError(FilmMatchError):
    """No acting user could be resolved."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, ErrorType.UNAUTHENTICATED)


class ValidationError(FilmMatchError):
    """Input rejected before any state change."""

    def __init__(self, message: str, entity: Optional[str] = None):
        super().__init__(message, ErrorType.VALIDATION, entity)


class ConflictError(FilmMatchError):
    """Relationship is already in a terminal or incompatible state."""

    def __init__(self, message: str, entity: Optional[str] = None):
        super().__init__(message, ErrorType.CONFLICT, entity)


class OperationCancelledError(FilmMatchError):
    """The caller cancelled the operation; the unit of work was rolled back."""

    def __init__(self, message: str = "Operation cancelled"):
        super().__init__(message, ErrorType.CANCELLED)
