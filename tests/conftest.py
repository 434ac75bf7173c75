import itertools
from datetime import date, datetime, timedelta

import pytest

from filmmatch.app import create_app
from filmmatch.models import db, User, Category, Film
from filmmatch.notifications import reset_notification_sender

_sequence = itertools.count()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Ensure no notification webhook or tuned weights leak into a test."""
    for name in (
        "NOTIFICATION_WEBHOOK_URL",
        "RECOMMENDATION_FRIEND_LIKE_WEIGHT",
        "RECOMMENDATION_FRIEND_DISLIKE_WEIGHT",
        "RECOMMENDATION_CATEGORY_LIKE_WEIGHT",
        "RECOMMENDATION_CATEGORY_DISLIKE_WEIGHT",
        "RECOMMENDATION_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_notification_sender()

    yield

    reset_notification_sender()


@pytest.fixture(scope='function')
def test_app():
    """Create a fresh Flask app with an in-memory database for each test."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SECRET_KEY': 'test-secret-key',
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(test_app):
    return test_app.test_client()


def _created_at():
    # Strictly increasing creation times keep creation-ordered listings predictable
    return datetime(2024, 1, 1) + timedelta(seconds=next(_sequence))


@pytest.fixture
def make_user(test_app):
    def factory(name, **kwargs):
        user = User(
            name=name,
            email=kwargs.pop('email', f"{name.lower()}@example.com"),
            created_at=_created_at(),
            **kwargs,
        )
        db.session.add(user)
        db.session.commit()
        return user
    return factory


@pytest.fixture
def make_category(test_app):
    def factory(name, **kwargs):
        category = Category(name=name, image_url=f"https://img.example.com/{name.lower()}.png",
                            created_at=_created_at(), **kwargs)
        db.session.add(category)
        db.session.commit()
        return category
    return factory


@pytest.fixture
def make_film(test_app):
    def factory(title, category, release_date=None, **kwargs):
        film = Film(
            title=title,
            category_id=category.id,
            release_date=release_date,
            short_description=f"{title} in one line",
            created_at=_created_at(),
            **kwargs,
        )
        db.session.add(film)
        db.session.commit()
        return film
    return factory


@pytest.fixture
def catalog(make_category, make_film):
    """Two categories with a handful of dated films."""
    scifi = make_category("Sci-Fi")
    drama = make_category("Drama")
    films = {
        "arrival": make_film("Arrival", scifi, date(2016, 11, 11)),
        "dune": make_film("Dune", scifi, date(2021, 10, 22)),
        "primer": make_film("Primer", scifi, date(2004, 10, 8)),
        "whiplash": make_film("Whiplash", drama, date(2014, 10, 10)),
        "aftersun": make_film("Aftersun", drama, date(2022, 10, 21)),
    }
    return {"scifi": scifi, "drama": drama, **films}


@pytest.fixture
def alice(make_user):
    return make_user("Alice")


@pytest.fixture
def bob(make_user):
    return make_user("Bob")


@pytest.fixture
def carol(make_user):
    return make_user("Carol")


@pytest.fixture
def auth():
    """Headers identifying a user as the acting principal."""
    def headers(user):
        return {"X-User-Id": user.id}
    return headers
