"""HTTP client for the placeholder posts API used to seed dummy books."""

import logging
import random
from typing import Any, Dict, List, Optional

import requests

from .errors import ExternalServiceError

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://jsonplaceholder.typicode.com/posts"
# the API serves this many posts; the page start is kept low enough to fill `limit`
TOTAL_POSTS = 100

PLACEHOLDER_PUB_DATE = "2023-05-10"
PLACEHOLDER_GENRE = "general"


def post_to_book_input(post: Dict[str, Any]) -> Dict[str, Any]:
    """Map a placeholder post onto a BookInput with synthesized fields."""
    title = str(post.get("title") or "")
    return {
        "title": " ".join(w[:1].upper() + w[1:] for w in title.split(" ")),
        "author": f"User {post.get('userId')}",
        "isbn": f"1000-{post.get('id')}",
        "pubDate": PLACEHOLDER_PUB_DATE,
        "genre": PLACEHOLDER_GENRE,
    }


class PlaceholderClient:
    """Fetches posts from the placeholder API. No retries, no backoff."""

    def __init__(self, base_url: str = DEFAULT_URL, timeout: float = 10,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url
        self.timeout = timeout
        # Create session for connection pooling
        self.session = session or requests.Session()

    def fetch_posts(self, limit: int, start: Optional[int] = None) -> List[Dict[str, Any]]:
        if start is None:
            start = random.randint(0, max(0, TOTAL_POSTS - limit))
        params = {"_start": start, "_limit": limit}
        logger.info("Fetching %d placeholder posts from %s (start=%d)", limit, self.base_url, start)
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Placeholder API request failed: %s", e)
            raise ExternalServiceError("Failed to fetch from external API") from e

        if response.status_code != 200:
            logger.error("Placeholder API returned HTTP %s", response.status_code)
            raise ExternalServiceError(
                f"Failed to fetch from external API (HTTP {response.status_code})"
            )
        try:
            data = response.json()
        except ValueError as e:
            logger.error("Placeholder API returned invalid JSON: %s", e)
            raise ExternalServiceError("External API returned invalid JSON") from e
        if not isinstance(data, list):
            logger.error("Placeholder API returned %s instead of a list", type(data).__name__)
            raise ExternalServiceError("External API returned an unexpected payload")
        return [p for p in data if isinstance(p, dict)]

    def fetch_book_inputs(self, limit: int) -> List[Dict[str, Any]]:
        return [post_to_book_input(p) for p in self.fetch_posts(limit)]

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
