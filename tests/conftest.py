from datetime import date

import pytest

from book_catalog import create_app
from book_catalog.config import TestingConfig
from book_catalog.errors import ExternalServiceError
from book_catalog.external import post_to_book_input
from book_catalog.models import db

FIXED_TODAY = date(2025, 10, 3)


def make_book(**overrides):
    data = {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "isbn": "9780743273565",
        "pubDate": "1925-04-10",
        "genre": "fiction",
    }
    data.update(overrides)
    return data


class FakePlaceholderSource:
    """Stands in for PlaceholderClient: serves canned posts, or fails."""

    def __init__(self, posts=None, fail=False):
        self.posts = posts or []
        self.fail = fail
        self.calls = []

    def fetch_book_inputs(self, limit):
        self.calls.append(limit)
        if self.fail:
            raise ExternalServiceError("Failed to fetch from external API")
        return [post_to_book_input(p) for p in self.posts[:limit]]


def make_posts(*ids, user_id=1):
    return [{"userId": user_id, "id": i, "title": f"post number {i}", "body": "..."} for i in ids]


@pytest.fixture
def app(tmp_path):
    app = create_app(
        TestingConfig,
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'test.db'}",
    )
    app.extensions["book_catalog"].today = lambda: FIXED_TODAY
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def catalog(app):
    with app.app_context():
        yield app.extensions["book_catalog"]
