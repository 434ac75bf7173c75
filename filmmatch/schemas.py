"""
Response schemas for FilmMatch.

Pydantic models for every shape returned by the core operations. Fields are
snake_case in Python and serialized with camelCase aliases (``releaseDate``,
``isSuccess``) for API clients.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model with camelCase serialization."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class ReactionState(str, Enum):
    """Net reaction of a user to a film after a toggle."""
    LIKED = "liked"
    DISLIKED = "disliked"
    NEUTRAL = "neutral"


class CategorySummary(ApiModel):
    id: str
    name: str
    image_url: Optional[str] = None


class FilmSummary(ApiModel):
    """
    Film as listed in catalog, reaction lists and recommendations.

    ``category`` is None when the film's category has been soft-deleted.
    """
    id: str
    title: str
    release_date: Optional[date] = None
    image_url: Optional[str] = None
    short_description: Optional[str] = None
    category: Optional[CategorySummary] = None


class FilmDetail(FilmSummary):
    long_description: Optional[str] = None


class FilmList(ApiModel):
    films: List[FilmSummary] = Field(default_factory=list)


class ToggleResult(ApiModel):
    film_id: str
    state: ReactionState
    created_at: Optional[datetime] = Field(None, description="Creation time of the record the toggle created")
    updated_at: datetime


class BookmarkResult(ApiModel):
    is_success: bool
    message: str


class UserSummary(ApiModel):
    id: str
    name: str
    has_subscription: bool = False


class UserList(ApiModel):
    users: List[UserSummary] = Field(default_factory=list)


class FriendSummary(UserSummary):
    friends_since: datetime


class FriendList(ApiModel):
    friends: List[FriendSummary] = Field(default_factory=list)


class FriendRequestSummary(ApiModel):
    id: str
    sender: UserSummary
    receiver_id: str
    message: str = ""
    is_accepted: bool = False
    created_at: datetime


class FriendRequestList(ApiModel):
    requests: List[FriendRequestSummary] = Field(default_factory=list)


class FriendRequestResult(ApiModel):
    request_id: str
    is_accepted: bool
    message: str
