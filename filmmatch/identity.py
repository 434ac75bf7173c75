"""
Identity resolver for the acting user.

Authentication happens upstream; the auth layer forwards the principal's user
id in a request header (``X-User-Id`` by default, configurable through the
``IDENTITY_HEADER`` app setting). The id must resolve to an active user.
"""

from flask import current_app, request

from filmmatch.errors import UnauthenticatedError
from filmmatch.logging_context import set_user_id
from filmmatch.models import User

DEFAULT_IDENTITY_HEADER = "X-User-Id"


def resolve_current_user_id() -> str:
    """
    Resolve the acting user for the current request.

    Raises:
        UnauthenticatedError: No header, or it names no active user
    """
    header = current_app.config.get('IDENTITY_HEADER', DEFAULT_IDENTITY_HEADER)
    user_id = (request.headers.get(header) or '').strip()
    if not user_id:
        raise UnauthenticatedError()

    if User.active().filter(User.id == user_id).first() is None:
        raise UnauthenticatedError("Unknown or inactive user")

    set_user_id(user_id)
    return user_id
