"""JSON API for the catalog, mounted under /api."""

import logging
import time

from flask import Blueprint, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from .errors import CatalogError
from .genres import GENRES, categorize

logger = logging.getLogger(__name__)

bp = Blueprint("api", __name__, url_prefix="/api")


def get_catalog():
    return current_app.extensions["book_catalog"]


def api_error_single(message, status=400):
    return jsonify({"message": message}), status


# --- request logging ---
@bp.before_app_request
def start_timer():
    g.request_started = time.perf_counter()


@bp.after_app_request
def log_request(response):
    started = g.pop("request_started", None)
    elapsed = (time.perf_counter() - started) * 1000 if started is not None else 0.0
    logger.info("%s %s -> %s (%.1f ms)", request.method, request.path, response.status_code, elapsed)
    return response


# --- errors ---
@bp.app_errorhandler(CatalogError)
def handle_catalog_error(exc):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.path, exc)
    else:
        logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.path, exc)
    return jsonify(exc.to_dict()), exc.status_code


@bp.app_errorhandler(404)
def not_found(e):
    return api_error_single("Not found", 404)


@bp.app_errorhandler(405)
def method_not_allowed(e):
    return api_error_single("Method not allowed", 405)


@bp.app_errorhandler(HTTPException)
def http_error(e):
    return api_error_single(e.description or e.name, e.code or 500)


# --- Books API ---
@bp.route("/books", methods=["GET"])
def list_books():
    q = request.args.get("q") or request.args.get("search")
    genre = request.args.get("genre")
    sort = request.args.get("sort")
    catalog = get_catalog()
    if q or genre or sort:
        books = catalog.search(text=q, genre=genre, order=sort or "title")
    else:
        books = catalog.list()
    return jsonify([b.to_dict() for b in books])


@bp.route("/books/<book_id>", methods=["GET"])
def get_book(book_id):
    return jsonify(get_catalog().get(book_id).to_dict())


@bp.route("/books", methods=["POST"])
def create_book():
    data = request.get_json(silent=True)
    if data is None:
        return api_error_single("Invalid JSON body", 400)
    book = get_catalog().add(data)
    return jsonify(book.to_dict()), 201


@bp.route("/books/<book_id>", methods=["PUT"])
def update_book(book_id):
    data = request.get_json(silent=True)
    if data is None:
        return api_error_single("Invalid JSON body", 400)
    book = get_catalog().update(book_id, data)
    return jsonify(book.to_dict())


@bp.route("/books/<book_id>", methods=["DELETE"])
def delete_book(book_id):
    get_catalog().remove(book_id)
    return "", 204


@bp.route("/books/fetch-external", methods=["POST"])
def fetch_external():
    data = request.get_json(silent=True) or {}
    count = data.get("count", current_app.config["EXTERNAL_IMPORT_COUNT"]) if isinstance(data, dict) else None
    catalog = get_catalog()
    added = catalog.import_external(count, current_app.extensions["placeholder_client"])
    return jsonify({
        "message": f"Added {len(added)} new books.",
        "allBooks": [b.to_dict() for b in catalog.list()],
    }), 201


# --- Genres API ---
@bp.route("/genres", methods=["GET"])
def list_genres():
    return jsonify([{"name": name, "category": categorize(name)} for name in GENRES])
