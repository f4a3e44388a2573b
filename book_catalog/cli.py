import click
from flask import current_app

from .catalog import ensure_genres
from .models import db

SAMPLE_BOOKS = (
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "isbn": "9780141439518",
        "pubDate": "1813-01-28",
        "genre": "romance",
    },
    {
        "title": "A Brief History of Time",
        "author": "Stephen Hawking",
        "isbn": "9780553380163",
        "pubDate": "1988-04-01",
        "genre": "science",
    },
)


def register_commands(app):

    @app.cli.command("init-db")
    @click.option("--sample", is_flag=True, help="Add a couple of sample books to an empty catalog.")
    def init_db(sample):
        """Create the tables, seed the genre set and optionally sample data."""
        if current_app.config["CATALOG_BACKEND"] == "sql":
            db.create_all()
            added = ensure_genres(db)
            click.echo(f"Database ready ({added} genres added).")
        catalog = current_app.extensions["book_catalog"]
        if sample:
            if catalog.list():
                click.echo("Catalog already has books, skipping sample data.")
            else:
                for data in SAMPLE_BOOKS:
                    catalog.add(data)
                click.echo(f"Added {len(SAMPLE_BOOKS)} sample books.")

    @app.cli.command("import-external")
    @click.option("--count", default=3, show_default=True, type=int)
    def import_external(count):
        """Import placeholder books from the external API."""
        catalog = current_app.extensions["book_catalog"]
        added = catalog.import_external(count, current_app.extensions["placeholder_client"])
        click.echo(f"Added {len(added)} new books.")
        for book in added:
            click.echo(f"  {book.id}  {book.title}")
