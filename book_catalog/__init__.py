"""
Book Catalog: a small Flask + SQLAlchemy service for a personal book list.

- Books CRUD through a JSON API under /api
- Authors and genres normalized into their own tables (SQL backend)
  or a single JSON file rewritten on every change (json backend)
- Title/author search and genre filter, derived age and category
- Import of placeholder books from a public API

Run:
    flask --app book_catalog init-db --sample
    flask --app book_catalog run
"""

import logging

from flask import Flask
from flask_talisman import Talisman

from .api import bp as api_bp
from .catalog import SQLBookCatalog, ensure_genres
from .cli import register_commands
from .config import Config
from .external import PlaceholderClient
from .json_store import JsonFileCatalog
from .models import db

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def configure_logging(level):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    logging.getLogger(__name__).setLevel(level)


def build_catalog(app):
    backend = app.config["CATALOG_BACKEND"]
    if backend == "sql":
        with app.app_context():
            db.create_all()
            ensure_genres(db)
        return SQLBookCatalog(db, auto_create_genres=app.config["GENRE_AUTO_CREATE"])
    if backend == "json":
        return JsonFileCatalog(app.config["CATALOG_JSON_PATH"])
    raise ValueError(f"Unknown CATALOG_BACKEND {backend!r}; expected 'sql' or 'json'")


def create_app(config_object=None, **overrides):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.config.update(overrides)

    configure_logging(app.config["LOG_LEVEL"])

    db.init_app(app)
    Talisman(
        app,
        force_https=app.config["FORCE_HTTPS"],
        content_security_policy={'default-src': ["'self'"]},
    )

    app.extensions["book_catalog"] = build_catalog(app)
    app.extensions["placeholder_client"] = PlaceholderClient(
        app.config["PLACEHOLDER_API_URL"],
        timeout=app.config["PLACEHOLDER_TIMEOUT"],
    )

    app.register_blueprint(api_bp)
    register_commands(app)

    logger.info("Book catalog started with the %s backend", app.config["CATALOG_BACKEND"])
    return app
