"""
Database models for FilmMatch.

This module defines SQLAlchemy models for the film catalog and the social graph:
- User, Category, Film: catalog and accounts
- UserLikedFilm, UserDislikedFilm, UserBookmarkedFilm: per-user film reactions
- FriendRequest, UserFriend: friend-request lifecycle and symmetric friendship rows

Rows are never physically removed; every model carries an ``is_deleted`` flag
and all read paths filter on it.
"""

import uuid
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import false

db = SQLAlchemy()


def new_id() -> str:
    return str(uuid.uuid4())


class SoftDeleteMixin:
    """Identity, creation timestamp and soft-delete flag shared by every table."""

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False)

    @classmethod
    def active(cls):
        """Query restricted to rows that are not soft-deleted."""
        return cls.query.filter(cls.is_deleted.is_(False))

    def soft_delete(self):
        self.is_deleted = True
        self.updated_at = datetime.utcnow()


class User(SoftDeleteMixin, db.Model):
    __tablename__ = 'users'

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    has_subscription = db.Column(db.Boolean, default=False, nullable=False)

    def __repr__(self):
        return f'<User {self.name} ({self.id})>'


class Category(SoftDeleteMixin, db.Model):
    __tablename__ = 'categories'

    name = db.Column(db.String(255), nullable=False)
    image_url = db.Column(db.String(512), nullable=True)

    def __repr__(self):
        return f'<Category {self.name}>'


class Film(SoftDeleteMixin, db.Model):
    __tablename__ = 'films'

    title = db.Column(db.String(255), nullable=False, index=True)
    release_date = db.Column(db.Date, nullable=True)
    image_url = db.Column(db.String(512), nullable=True)
    long_description = db.Column(db.Text, nullable=True)
    short_description = db.Column(db.String(512), nullable=True)
    category_id = db.Column(db.String(36), db.ForeignKey('categories.id'), nullable=False, index=True)

    def __repr__(self):
        return f'<Film {self.title}>'


class UserLikedFilm(SoftDeleteMixin, db.Model):
    __tablename__ = 'user_liked_films'

    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    film_id = db.Column(db.String(36), db.ForeignKey('films.id'), nullable=False, index=True)


class UserDislikedFilm(SoftDeleteMixin, db.Model):
    __tablename__ = 'user_disliked_films'

    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    film_id = db.Column(db.String(36), db.ForeignKey('films.id'), nullable=False, index=True)


class UserBookmarkedFilm(SoftDeleteMixin, db.Model):
    __tablename__ = 'user_bookmarked_films'

    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    film_id = db.Column(db.String(36), db.ForeignKey('films.id'), nullable=False, index=True)


def _unordered_pair(context) -> str:
    params = context.get_current_parameters()
    return ':'.join(sorted((params['sender_id'], params['receiver_id'])))


class FriendRequest(SoftDeleteMixin, db.Model):
    __tablename__ = 'friend_requests'

    sender_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    receiver_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    # same value for A->B and B->A
    pair_key = db.Column(db.String(73), nullable=False, default=_unordered_pair)
    message = db.Column(db.String(512), nullable=False, default='')
    is_accepted = db.Column(db.Boolean, default=False, nullable=False)

    @property
    def is_pending(self) -> bool:
        return not self.is_deleted and not self.is_accepted

    def __repr__(self):
        return f'<FriendRequest {self.sender_id} -> {self.receiver_id}>'


class UserFriend(SoftDeleteMixin, db.Model):
    __tablename__ = 'user_friends'

    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    friend_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)


def _active_pair_index(model, *columns):
    """At most one active row per key; soft-deleted history is unconstrained."""
    db.Index(
        f'uq_{model.__tablename__}_active',
        *(getattr(model, column) for column in columns),
        unique=True,
        sqlite_where=model.is_deleted == false(),
        postgresql_where=model.is_deleted == false(),
    )


for _model in (UserLikedFilm, UserDislikedFilm, UserBookmarkedFilm):
    _active_pair_index(_model, 'user_id', 'film_id')
_active_pair_index(FriendRequest, 'pair_key')
_active_pair_index(UserFriend, 'user_id', 'friend_id')
