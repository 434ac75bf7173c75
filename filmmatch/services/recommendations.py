"""
Film recommendations from friends' reactions and category affinity.

Each eligible film gets

    score = friend_like_weight     * (friends who liked it)
          - friend_dislike_weight  * (friends who disliked it)
          + category_like_weight    * (films the user liked in its category)
          - category_dislike_weight * (films the user disliked in its category)

and the list is ordered by score, then newest release date (undated films
last), then film id. A user with no friends and no likes therefore gets every
eligible film newest-first.

Eligible films are active, belong to an active category, and have not been
liked or disliked by the user.

Configuration via environment variables:
- RECOMMENDATION_FRIEND_LIKE_WEIGHT (default: 2.0)
- RECOMMENDATION_FRIEND_DISLIKE_WEIGHT (default: 2.0)
- RECOMMENDATION_CATEGORY_LIKE_WEIGHT (default: 1.0)
- RECOMMENDATION_CATEGORY_DISLIKE_WEIGHT (default: 0.5)
- RECOMMENDATION_LIMIT (default: 20)
"""

import os
import time
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy import func

from filmmatch.logging_config import get_logger
from filmmatch.metrics import track_recommendations
from filmmatch.models import db, Category, Film, UserLikedFilm, UserDislikedFilm
from filmmatch.schemas import FilmList
from filmmatch.services.friends import friend_ids
from filmmatch.services.queries import films_with_category, to_film_summary

logger = get_logger(__name__)


@dataclass(frozen=True)
class RecommendationSettings:
    friend_like_weight: float = 2.0
    friend_dislike_weight: float = 2.0
    category_like_weight: float = 1.0
    category_dislike_weight: float = 0.5
    limit: int = 20

    @classmethod
    def from_env(cls) -> "RecommendationSettings":
        return cls(
            friend_like_weight=float(os.getenv("RECOMMENDATION_FRIEND_LIKE_WEIGHT", "2.0")),
            friend_dislike_weight=float(os.getenv("RECOMMENDATION_FRIEND_DISLIKE_WEIGHT", "2.0")),
            category_like_weight=float(os.getenv("RECOMMENDATION_CATEGORY_LIKE_WEIGHT", "1.0")),
            category_dislike_weight=float(os.getenv("RECOMMENDATION_CATEGORY_DISLIKE_WEIGHT", "0.5")),
            limit=int(os.getenv("RECOMMENDATION_LIMIT", "20")),
        )


def _rated_film_ids(user_id: str) -> Set[str]:
    rated = set()
    for model in (UserLikedFilm, UserDislikedFilm):
        rows = (
            db.session.query(model.film_id)
            .filter(model.user_id == user_id, model.is_deleted.is_(False))
            .all()
        )
        rated.update(film_id for (film_id,) in rows)
    return rated


def _category_counts(model, user_id: str) -> Dict[str, int]:
    """Per-category count of the user's active reactions of one kind."""
    rows = (
        db.session.query(Film.category_id, func.count(model.id))
        .join(Film, Film.id == model.film_id)
        .filter(
            model.user_id == user_id,
            model.is_deleted.is_(False),
            Film.is_deleted.is_(False),
        )
        .group_by(Film.category_id)
        .all()
    )
    return {category_id: count for category_id, count in rows}


def _friend_counts(model, friends: Set[str]) -> Counter:
    """Per-film count of friends holding an active reaction of one kind."""
    if not friends:
        return Counter()
    rows = (
        db.session.query(model.film_id, func.count(model.id))
        .filter(model.user_id.in_(friends), model.is_deleted.is_(False))
        .group_by(model.film_id)
        .all()
    )
    return Counter({film_id: count for film_id, count in rows})


def _ordering_key(score: float, film: Film) -> Tuple:
    undated = film.release_date is None
    recency = 0 if undated else -film.release_date.toordinal()
    return (-score, undated, recency, film.id)


def get_recommendations(
    user_id: str,
    settings: Optional[RecommendationSettings] = None,
    limit: Optional[int] = None,
) -> FilmList:
    """
    Ranked films for a user.

    Args:
        user_id: Acting user
        settings: Scoring weights (defaults to environment configuration)
        limit: Maximum number of films (defaults to ``settings.limit``)

    Returns:
        FilmList in recommendation order
    """
    settings = settings or RecommendationSettings.from_env()
    limit = limit or settings.limit
    start_time = time.time()

    rated = _rated_film_ids(user_id)
    liked_categories = _category_counts(UserLikedFilm, user_id)
    disliked_categories = _category_counts(UserDislikedFilm, user_id)

    friends = friend_ids(user_id)
    friend_likes = _friend_counts(UserLikedFilm, friends)
    friend_dislikes = _friend_counts(UserDislikedFilm, friends)

    candidates = films_with_category().filter(Category.id.isnot(None))
    if rated:
        candidates = candidates.filter(Film.id.notin_(rated))

    scored: List[Tuple[Tuple, Film, Category]] = []
    for film, category in candidates.all():
        score = (
            settings.friend_like_weight * friend_likes[film.id]
            - settings.friend_dislike_weight * friend_dislikes[film.id]
            + settings.category_like_weight * liked_categories.get(film.category_id, 0)
            - settings.category_dislike_weight * disliked_categories.get(film.category_id, 0)
        )
        scored.append((_ordering_key(score, film), film, category))

    scored.sort(key=lambda item: item[0])
    films = [to_film_summary(film, category) for _, film, category in scored[:limit]]

    strategy = 'scored' if friends or liked_categories else 'fallback'
    duration = time.time() - start_time
    track_recommendations(strategy, duration)
    logger.info(
        "recommendations_computed",
        strategy=strategy,
        candidates=len(scored),
        returned=len(films),
        friends=len(friends),
        duration_ms=round(duration * 1000, 2),
    )
    return FilmList(films=films)
