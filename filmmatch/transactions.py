"""
Unit-of-work helper around the Flask-SQLAlchemy session.

Every mutating operation runs inside ``unit_of_work``: the block either commits
as a whole or is rolled back, so multi-row rules (like/dislike exclusion,
symmetric friendship rows) are never visible half-applied. Concurrency control
is left to the database transaction; nothing here retries.
"""

import threading
from contextlib import contextmanager
from typing import Optional

from flask import request

from filmmatch.errors import FilmMatchError, OperationCancelledError
from filmmatch.logging_config import get_logger
from filmmatch.metrics import track_unit_of_work
from filmmatch.models import db

logger = get_logger(__name__)


class CancellationToken:
    """Cancellation signal passed down from the caller (request lifetime)."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self.cancelled:
            raise OperationCancelledError()


@contextmanager
def unit_of_work(operation: str, cancellation: Optional[CancellationToken] = None):
    """
    Run a block of writes atomically.

    Args:
        operation: Operation name used in logs and metrics
        cancellation: Optional token checked before the work starts and before commit

    Yields:
        The active SQLAlchemy session

    Raises:
        OperationCancelledError: The token was cancelled; nothing was committed
    """
    session = db.session
    try:
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        yield session
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        session.commit()
    except OperationCancelledError:
        session.rollback()
        track_unit_of_work(operation, 'cancelled')
        logger.warning("unit_of_work_cancelled", operation=operation)
        raise
    except FilmMatchError as e:
        session.rollback()
        track_unit_of_work(operation, 'rejected')
        logger.info("unit_of_work_rejected", operation=operation, error_type=e.error_type.value, error=e.message)
        raise
    except Exception as e:
        session.rollback()
        track_unit_of_work(operation, 'rolled_back')
        logger.error("unit_of_work_rolled_back", operation=operation, error=str(e))
        raise
    else:
        track_unit_of_work(operation, 'committed')


CANCELLATION_ENVIRON_KEY = 'filmmatch.cancellation'


def request_cancellation() -> CancellationToken:
    """
    Cancellation token scoped to the current Flask request.

    Flask itself never cancels a request. A WSGI server or middleware that
    detects a dropped client can place its own token in the environ under
    ``CANCELLATION_ENVIRON_KEY`` and cancel it; otherwise a fresh token is
    created and stays uncancelled.
    """
    return request.environ.setdefault(CANCELLATION_ENVIRON_KEY, CancellationToken())
