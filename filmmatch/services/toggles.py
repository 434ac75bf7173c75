"""
Like / dislike / bookmark toggles.

Like and dislike are mutually exclusive per (user, film): turning one on
soft-deletes the other inside the same unit of work. Bookmarks are independent
and idempotent; a repeated bookmark is reported as an informational result
instead of an error.
"""

from datetime import datetime
from typing import Optional

from filmmatch.logging_config import get_logger
from filmmatch.metrics import track_reaction
from filmmatch.models import UserLikedFilm, UserDislikedFilm, UserBookmarkedFilm
from filmmatch.schemas import ToggleResult, BookmarkResult, ReactionState
from filmmatch.services.queries import get_active_film
from filmmatch.transactions import CancellationToken, unit_of_work

logger = get_logger(__name__)


def _active_association(model, user_id: str, film_id: str):
    return model.active().filter(model.user_id == user_id, model.film_id == film_id).first()


def _toggle(
    kind: str,
    target,
    opposite,
    on_state: ReactionState,
    user_id: str,
    film_id: str,
    cancellation: Optional[CancellationToken],
) -> ToggleResult:
    with unit_of_work(f"toggle_{kind}", cancellation) as session:
        get_active_film(film_id)

        existing = _active_association(target, user_id, film_id)
        created_at = None

        if existing is not None:
            existing.soft_delete()
            state = ReactionState.NEUTRAL
        else:
            opposing = _active_association(opposite, user_id, film_id)
            if opposing is not None:
                opposing.soft_delete()
                logger.info(f"film_{kind}_cleared_opposite", film_id=film_id)

            record = target(user_id=user_id, film_id=film_id)
            session.add(record)
            session.flush()
            created_at = record.created_at
            state = on_state

    track_reaction(kind, state.value)
    logger.info(f"film_{kind}_toggled", film_id=film_id, state=state.value)
    return ToggleResult(film_id=film_id, state=state, created_at=created_at, updated_at=datetime.utcnow())


def toggle_like(user_id: str, film_id: str, cancellation: Optional[CancellationToken] = None) -> ToggleResult:
    """
    Like a film, or remove an existing like.

    Liking a film the user currently dislikes clears the dislike first.

    Raises:
        NotFoundError: The film does not exist or is soft-deleted
    """
    return _toggle('like', UserLikedFilm, UserDislikedFilm, ReactionState.LIKED, user_id, film_id, cancellation)


def toggle_dislike(user_id: str, film_id: str, cancellation: Optional[CancellationToken] = None) -> ToggleResult:
    """Mirror of :func:`toggle_like`."""
    return _toggle('dislike', UserDislikedFilm, UserLikedFilm, ReactionState.DISLIKED, user_id, film_id, cancellation)


def bookmark_film(user_id: str, film_id: str, cancellation: Optional[CancellationToken] = None) -> BookmarkResult:
    with unit_of_work("bookmark", cancellation) as session:
        get_active_film(film_id)

        if _active_association(UserBookmarkedFilm, user_id, film_id) is not None:
            result = BookmarkResult(is_success=False, message="Film is already bookmarked")
        else:
            session.add(UserBookmarkedFilm(user_id=user_id, film_id=film_id))
            result = BookmarkResult(is_success=True, message="Film bookmarked")

    track_reaction('bookmark', 'added' if result.is_success else 'unchanged')
    logger.info("film_bookmarked", film_id=film_id, changed=result.is_success)
    return result


def unbookmark_film(user_id: str, film_id: str, cancellation: Optional[CancellationToken] = None) -> BookmarkResult:
    with unit_of_work("unbookmark", cancellation):
        get_active_film(film_id)

        bookmark = _active_association(UserBookmarkedFilm, user_id, film_id)
        if bookmark is None:
            result = BookmarkResult(is_success=False, message="Film is not bookmarked")
        else:
            bookmark.soft_delete()
            result = BookmarkResult(is_success=True, message="Bookmark removed")

    track_reaction('unbookmark', 'removed' if result.is_success else 'unchanged')
    logger.info("film_unbookmarked", film_id=film_id, changed=result.is_success)
    return result
