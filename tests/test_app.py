"""Tests for configuration, the app factory and the CLI commands."""

import importlib

import pytest

from book_catalog import config, create_app
from book_catalog.catalog import SQLBookCatalog
from book_catalog.json_store import JsonFileCatalog

from conftest import FakePlaceholderSource, make_posts


@pytest.fixture
def reload_config(monkeypatch):
    for name in ("BOOKCAT_DB", "BOOKCAT_BACKEND", "BOOKCAT_GENRE_AUTO_CREATE",
                 "BOOKCAT_FORCE_HTTPS", "BOOKCAT_PLACEHOLDER_TIMEOUT", "BOOKCAT_SECRET"):
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the picture
    monkeypatch.setattr("dotenv.load_dotenv", lambda *a, **kw: False)
    yield lambda: importlib.reload(config).Config
    monkeypatch.undo()
    importlib.reload(config)


def test_defaults(reload_config):
    cfg = reload_config()
    assert cfg.SQLALCHEMY_DATABASE_URI == "sqlite:///book_catalog.db"
    assert cfg.CATALOG_BACKEND == "sql"
    assert cfg.GENRE_AUTO_CREATE is False
    assert cfg.PLACEHOLDER_TIMEOUT == 10.0
    assert cfg.EXTERNAL_IMPORT_COUNT == 3
    assert len(cfg.SECRET_KEY) == 64


def test_environment_overrides(reload_config, monkeypatch):
    monkeypatch.setenv("BOOKCAT_DB", "sqlite:////tmp/other.db")
    monkeypatch.setenv("BOOKCAT_BACKEND", "json")
    monkeypatch.setenv("BOOKCAT_GENRE_AUTO_CREATE", "true")
    monkeypatch.setenv("BOOKCAT_PLACEHOLDER_TIMEOUT", "2.5")
    monkeypatch.setenv("BOOKCAT_SECRET", "s3cret")
    cfg = reload_config()
    assert cfg.SQLALCHEMY_DATABASE_URI == "sqlite:////tmp/other.db"
    assert cfg.CATALOG_BACKEND == "json"
    assert cfg.GENRE_AUTO_CREATE is True
    assert cfg.PLACEHOLDER_TIMEOUT == 2.5
    assert cfg.SECRET_KEY == "s3cret"


def test_app_uses_sql_backend(app):
    assert isinstance(app.extensions["book_catalog"], SQLBookCatalog)
    assert app.config["TESTING"] is True


def test_json_backend(tmp_path):
    app = create_app(
        config.TestingConfig,
        CATALOG_BACKEND="json",
        CATALOG_JSON_PATH=str(tmp_path / "books.json"),
    )
    assert isinstance(app.extensions["book_catalog"], JsonFileCatalog)
    resp = app.test_client().post("/api/books", json={
        "title": "Dune", "author": "Frank Herbert", "isbn": "9780441013593",
        "pubDate": "1965-08-01", "genre": "fiction",
    })
    assert resp.status_code == 201
    assert (tmp_path / "books.json").exists()


def test_unknown_backend():
    with pytest.raises(ValueError):
        create_app(config.TestingConfig, CATALOG_BACKEND="mongo")


class TestCli:
    def test_init_db_with_sample(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["init-db", "--sample"])
        assert result.exit_code == 0
        assert "Added 2 sample books." in result.output

        result = runner.invoke(args=["init-db", "--sample"])
        assert "already has books" in result.output
        with app.app_context():
            assert len(app.extensions["book_catalog"].list()) == 2

    def test_import_external(self, app):
        app.extensions["placeholder_client"] = FakePlaceholderSource(make_posts(8, 9))
        result = app.test_cli_runner().invoke(args=["import-external", "--count", "2"])
        assert result.exit_code == 0
        assert "Added 2 new books." in result.output
        assert "Post Number 8" in result.output
