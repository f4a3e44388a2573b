"""Configuration, read from the environment (and a local .env file)."""

import os
import secrets

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name, default="False"):
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


class Config:
    SECRET_KEY = os.environ.get("BOOKCAT_SECRET") or secrets.token_hex(32)
    SQLALCHEMY_DATABASE_URI = os.environ.get("BOOKCAT_DB") or "sqlite:///book_catalog.db"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "sql" (Flask-SQLAlchemy) or "json" (single file rewritten on every change)
    CATALOG_BACKEND = os.environ.get("BOOKCAT_BACKEND", "sql")
    CATALOG_JSON_PATH = os.environ.get("BOOKCAT_JSON_PATH", "data/books.json")
    GENRE_AUTO_CREATE = _env_bool("BOOKCAT_GENRE_AUTO_CREATE")

    PLACEHOLDER_API_URL = os.environ.get(
        "BOOKCAT_PLACEHOLDER_URL", "https://jsonplaceholder.typicode.com/posts"
    )
    PLACEHOLDER_TIMEOUT = float(os.environ.get("BOOKCAT_PLACEHOLDER_TIMEOUT", "10"))
    EXTERNAL_IMPORT_COUNT = 3

    FORCE_HTTPS = _env_bool("BOOKCAT_FORCE_HTTPS")
    LOG_LEVEL = os.environ.get("BOOKCAT_LOG_LEVEL", "INFO")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    FORCE_HTTPS = False
