"""Closed genre set and the genre -> category lookup."""

from typing import Optional

GENRES = (
    "fiction",
    "science",
    "history",
    "biography",
    "technology",
    "romance",
    "general",
)

DEFAULT_CATEGORY = "General"

CATEGORY_BY_GENRE = {
    "fiction": "Entertainment",
    "science": "Educational",
    "history": "Informational",
    "biography": "Inspirational",
    "technology": "Technical",
    "romance": "Emotional",
}


def normalize_genre(value) -> Optional[str]:
    """Return the canonical (lower-case) genre, or None if it isn't in the set."""
    if not isinstance(value, str):
        return None
    name = value.strip().lower()
    return name if name in GENRES else None


def categorize(genre) -> str:
    if not isinstance(genre, str):
        return DEFAULT_CATEGORY
    return CATEGORY_BY_GENRE.get(genre.strip().lower(), DEFAULT_CATEGORY)
