"""
FilmMatch - social film matching backend

A Flask-based API where users react to films (like, dislike, bookmark),
befriend each other, and receive recommendations built from their friends'
tastes and their own category preferences.
"""

__version__ = "1.0.0"

from .errors import (
    FilmMatchError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
    ConflictError,
    OperationCancelledError,
    ErrorType,
)

__all__ = [
    "FilmMatchError",
    "NotFoundError",
    "UnauthenticatedError",
    "ValidationError",
    "ConflictError",
    "OperationCancelledError",
    "ErrorType",
]
