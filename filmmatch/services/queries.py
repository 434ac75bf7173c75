"""
Read-only projections over the catalog and per-user reaction lists.

Only active (non soft-deleted) rows are visible. Films are joined to their
category explicitly; when the category has been soft-deleted the film is
still listed, with ``category`` set to None.
"""

from typing import Optional

from sqlalchemy import and_

from filmmatch.errors import NotFoundError
from filmmatch.logging_config import get_logger
from filmmatch.models import (
    db, User, Category, Film,
    UserLikedFilm, UserDislikedFilm, UserBookmarkedFilm,
)
from filmmatch.schemas import (
    CategorySummary, FilmSummary, FilmDetail, FilmList, UserSummary, UserList,
)

logger = get_logger(__name__)


def get_active_user(user_id: str) -> User:
    user = User.active().filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError(f"User {user_id} not found", entity="user")
    return user


def get_active_film(film_id: str) -> Film:
    film = Film.active().filter(Film.id == film_id).first()
    if film is None:
        raise NotFoundError(f"Film {film_id} not found", entity="film")
    return film


def search_pattern(text: str) -> str:
    """Substring ILIKE pattern with the user's own wildcards taken literally."""
    escaped = text.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def films_with_category():
    """Query of (Film, Category-or-None) pairs over active films."""
    return (
        db.session.query(Film, Category)
        .outerjoin(Category, and_(Category.id == Film.category_id, Category.is_deleted.is_(False)))
        .filter(Film.is_deleted.is_(False))
    )


def to_film_summary(film: Film, category: Optional[Category], detail: bool = False) -> FilmSummary:
    category_summary = None
    if category is not None:
        category_summary = CategorySummary(id=category.id, name=category.name, image_url=category.image_url)

    fields = dict(
        id=film.id,
        title=film.title,
        release_date=film.release_date,
        image_url=film.image_url,
        short_description=film.short_description,
        category=category_summary,
    )
    if detail:
        return FilmDetail(long_description=film.long_description, **fields)
    return FilmSummary(**fields)


def to_user_summary(user: User) -> UserSummary:
    return UserSummary(id=user.id, name=user.name, has_subscription=user.has_subscription)


def _reaction_films(association, user_id: str) -> FilmList:
    rows = (
        films_with_category()
        .join(association, association.film_id == Film.id)
        .filter(association.user_id == user_id, association.is_deleted.is_(False))
        .order_by(association.created_at, association.id)
        .all()
    )
    return FilmList(films=[to_film_summary(film, category) for film, category in rows])


def get_liked_films(user_id: str) -> FilmList:
    result = _reaction_films(UserLikedFilm, user_id)
    logger.info("liked_films_listed", count=len(result.films))
    return result


def get_disliked_films(user_id: str, target_user_id: Optional[str] = None) -> FilmList:
    """
    List disliked films of the acting user, or of ``target_user_id`` when given.

    Raises:
        NotFoundError: The target user does not exist
    """
    owner_id = user_id
    if target_user_id and target_user_id != user_id:
        owner_id = get_active_user(target_user_id).id

    result = _reaction_films(UserDislikedFilm, owner_id)
    logger.info("disliked_films_listed", owner_id=owner_id, count=len(result.films))
    return result


def get_bookmarked_films(user_id: str) -> FilmList:
    result = _reaction_films(UserBookmarkedFilm, user_id)
    logger.info("bookmarked_films_listed", count=len(result.films))
    return result


def get_all_films(category_id: Optional[str] = None, search: Optional[str] = None) -> FilmList:
    """
    Catalog listing with optional category filter and title search.

    Films whose category is soft-deleted are omitted when filtering by category.
    """
    query = films_with_category()
    if category_id:
        query = query.filter(Film.category_id == category_id, Category.id.isnot(None))
    if search:
        query = query.filter(Film.title.ilike(search_pattern(search), escape="\\"))

    rows = query.order_by(Film.created_at, Film.id).all()
    logger.info("films_listed", category_id=category_id, search=search, count=len(rows))
    return FilmList(films=[to_film_summary(film, category) for film, category in rows])


def get_film(film_id: str) -> FilmDetail:
    row = films_with_category().filter(Film.id == film_id).first()
    if row is None:
        raise NotFoundError(f"Film {film_id} not found", entity="film")
    film, category = row
    return to_film_summary(film, category, detail=True)


def get_usernames(query: Optional[str] = None) -> UserList:
    users = User.active()
    if query:
        users = users.filter(User.name.ilike(search_pattern(query), escape="\\"))
    users = users.order_by(User.created_at, User.id).all()
    return UserList(users=[to_user_summary(user) for user in users])


def get_username_by_id(user_id: str) -> UserSummary:
    return to_user_summary(get_active_user(user_id))
