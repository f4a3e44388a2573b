"""Tests for the placeholder API client."""

import pytest
import requests

from book_catalog.errors import ExternalServiceError
from book_catalog.external import TOTAL_POSTS, PlaceholderClient, post_to_book_input

URL = "https://example.test/posts"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


POSTS = [
    {"userId": 3, "id": 21, "title": "asperiores ea ipsam voluptatibus", "body": "..."},
    {"userId": 3, "id": 22, "title": "dolor sint quo", "body": "..."},
]


def test_post_mapping():
    assert post_to_book_input(POSTS[0]) == {
        "title": "Asperiores Ea Ipsam Voluptatibus",
        "author": "User 3",
        "isbn": "1000-21",
        "pubDate": "2023-05-10",
        "genre": "general",
    }


def test_fetch_sends_paging_params():
    session = FakeSession(FakeResponse(payload=POSTS))
    client = PlaceholderClient(URL, timeout=5, session=session)
    assert client.fetch_posts(2, start=10) == POSTS
    assert session.calls == [(URL, {"_start": 10, "_limit": 2}, 5)]


def test_random_start_stays_in_range():
    session = FakeSession(FakeResponse(payload=[]))
    client = PlaceholderClient(URL, session=session)
    for _ in range(20):
        client.fetch_posts(3)
    assert all(0 <= params["_start"] <= TOTAL_POSTS - 3 for _, params, _ in session.calls)


def test_fetch_book_inputs_maps_posts():
    client = PlaceholderClient(URL, session=FakeSession(FakeResponse(payload=POSTS + ["junk"])))
    inputs = client.fetch_book_inputs(3)
    assert [i["isbn"] for i in inputs] == ["1000-21", "1000-22"]


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.exceptions.ConnectionError("connection refused")),
        FakeSession(error=requests.exceptions.Timeout("timed out")),
        FakeSession(FakeResponse(status_code=503)),
        FakeSession(FakeResponse(bad_json=True)),
        FakeSession(FakeResponse(payload={"error": "nope"})),
    ],
)
def test_failures_raise_external_service_error(session):
    client = PlaceholderClient(URL, session=session)
    with pytest.raises(ExternalServiceError) as excinfo:
        client.fetch_posts(3)
    assert excinfo.value.status_code == 500


def test_context_manager_closes_session():
    session = FakeSession(FakeResponse(payload=[]))
    with PlaceholderClient(URL, session=session) as client:
        client.fetch_posts(1)
    assert session.closed


class PagingSession(FakeSession):
    """Serves a fixed set of posts, sliced by _start/_limit like the real API."""

    def __init__(self, total=TOTAL_POSTS):
        super().__init__()
        self.posts = [
            {"userId": i % 10 + 1, "id": i, "title": f"post {i}", "body": "..."}
            for i in range(1, total + 1)
        ]

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        start, limit = params["_start"], params["_limit"]
        return FakeResponse(payload=self.posts[start:start + limit])


@pytest.mark.parametrize("limit", [3, 10, 50, TOTAL_POSTS])
def test_highest_start_still_fills_the_page(monkeypatch, limit):
    monkeypatch.setattr("book_catalog.external.random.randint", lambda a, b: b)
    client = PlaceholderClient(URL, session=PagingSession())
    assert len(client.fetch_posts(limit)) == limit


def test_import_gets_every_requested_book(catalog, monkeypatch):
    monkeypatch.setattr("book_catalog.external.random.randint", lambda a, b: b)
    client = PlaceholderClient(URL, session=PagingSession())
    added = catalog.import_external(10, client)
    assert len(added) == 10
    assert len(catalog.list()) == 10
