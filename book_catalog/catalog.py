"""
The BookCatalog: single owner of the Book collection.

``BookCatalog`` holds the behaviour every backend shares (derived fields,
search, the placeholder import); ``SQLBookCatalog`` stores books through
Flask-SQLAlchemy with Author and Genre normalized into their own tables.
The file-backed variant lives in ``json_store``.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from .dates import Age, compute_age
from .errors import (
    CatalogError, ConflictError, NotFoundError, StorageError, ValidationError,
)
from .genres import GENRES, categorize
from .models import Author, Book, Genre
from .validation import clean_book_input

logger = logging.getLogger(__name__)

DUPLICATE_ISBN = "A book with this ISBN already exists"
SEARCH_ORDERS = ("title", "pubDate")
MAX_IMPORT = 100


@dataclass(frozen=True)
class BookRecord:
    """A book as the outside world sees it, with derived fields filled in."""

    id: str
    title: str
    author: str
    isbn: str
    pub_date: date
    genre: str
    age: Age
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "pubDate": self.pub_date.isoformat(),
            "genre": self.genre,
            "age": str(self.age),
            "ageDetail": self.age.to_dict(),
            "category": self.category,
        }


class BookCatalog:
    """Shared catalog behaviour. Subclasses own storage.

    Subclasses implement ``list``, ``get``, ``add``, ``update`` and
    ``remove``; every one of them returns ``BookRecord`` objects built by
    ``_record`` so age and category always reflect the current clock.
    """

    def __init__(self, today=date.today):
        self.today = today

    def list(self) -> List[BookRecord]:
        raise NotImplementedError

    def get(self, book_id: str) -> BookRecord:
        raise NotImplementedError

    def add(self, candidate: Mapping[str, Any]) -> BookRecord:
        raise NotImplementedError

    def update(self, book_id: str, patch: Mapping[str, Any]) -> BookRecord:
        raise NotImplementedError

    def remove(self, book_id: str) -> None:
        raise NotImplementedError

    def _record(self, book_id, title, author, isbn, pub_date, genre) -> BookRecord:
        return BookRecord(
            id=book_id,
            title=title,
            author=author,
            isbn=isbn,
            pub_date=pub_date,
            genre=genre,
            age=compute_age(pub_date, self.today()),
            category=categorize(genre),
        )

    def search(self, text: Optional[str] = None, genre: Optional[str] = None,
               order: str = "title") -> List[BookRecord]:
        """Filter by title/author substring and exact genre, both optional.

        Results are sorted by title unless ``order`` is ``"pubDate"``, which
        puts the newest publications first.
        """
        if order not in SEARCH_ORDERS:
            raise ValidationError({"sort": [f"Must be one of: {', '.join(SEARCH_ORDERS)}"]})
        needle = (text or "").strip().casefold()
        wanted = (genre or "").strip().lower()

        books = self.list()
        if needle:
            books = [
                b for b in books
                if needle in b.title.casefold() or needle in b.author.casefold()
            ]
        if wanted:
            books = [b for b in books if b.genre.lower() == wanted]

        if order == "pubDate":
            books.sort(key=lambda b: b.pub_date, reverse=True)
        else:
            books.sort(key=lambda b: (b.title.casefold(), b.title))
        return books

    def import_external(self, n: int, source) -> List[BookRecord]:
        """Add ``n`` placeholder books fetched from ``source``.

        Candidates whose title is already in the catalog are skipped, as are
        candidates the catalog rejects; only storage failures abort the batch.
        """
        if isinstance(n, bool) or not isinstance(n, int) or not 1 <= n <= MAX_IMPORT:
            raise ValidationError({"count": [f"Must be an integer between 1 and {MAX_IMPORT}"]})

        candidates = source.fetch_book_inputs(n)
        titles = {b.title for b in self.list()}
        added = []
        for candidate in candidates:
            title = candidate.get("title")
            if title in titles:
                logger.info("Skipping external book %r: title already in catalog", title)
                continue
            try:
                book = self.add(candidate)
            except (ConflictError, ValidationError) as exc:
                logger.info("Skipping external book %r: %s", title, exc)
                continue
            titles.add(book.title)
            added.append(book)

        if added:
            logger.info("Added %d new books from the external API", len(added))
        else:
            logger.info("No new unique books to add from the external API")
        return added


def ensure_genres(db) -> int:
    """Create any missing Genre rows for the closed set. Returns how many were added."""
    existing = {g.name for g in Genre.query.all()}
    missing = [name for name in GENRES if name not in existing]
    for name in missing:
        db.session.add(Genre(name=name))
    if missing:
        db.session.commit()
        logger.info("Seeded genres: %s", ", ".join(missing))
    return len(missing)


class SQLBookCatalog(BookCatalog):
    """Catalog stored in the relational database via Flask-SQLAlchemy.

    With ``auto_create_genres`` a closed-set genre that has no Genre row yet
    is created on first use; otherwise such a write is a conflict.
    """

    def __init__(self, db, auto_create_genres: bool = False, today=date.today):
        super().__init__(today)
        self.db = db
        self.auto_create_genres = auto_create_genres

    # --- helpers ---
    @contextmanager
    def _transaction(self, action):
        session = self.db.session
        try:
            yield session
            session.commit()
        except CatalogError:
            session.rollback()
            raise
        except IntegrityError as exc:
            session.rollback()
            if "isbn" in str(exc.orig).lower():
                raise ConflictError(DUPLICATE_ISBN) from exc
            logger.error("Integrity error while %s: %s", action, exc)
            raise StorageError(f"Error {action}") from exc
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Database error while %s: %s", action, exc)
            raise StorageError(f"Error {action}") from exc

    def _query(self):
        return Book.query.options(joinedload(Book.author), joinedload(Book.genre))

    def _to_record(self, book):
        return self._record(
            book.id, book.title, book.author.name, book.isbn,
            book.publication_date, book.genre.name,
        )

    def _isbn_taken(self, isbn, exclude_id=None):
        q = Book.query.filter(Book.isbn == isbn)
        if exclude_id is not None:
            q = q.filter(Book.id != exclude_id)
        return q.first() is not None

    def _get_or_create_author(self, name):
        author = Author.query.filter_by(name=name).first()
        if author is None:
            author = Author(name=name)
            self.db.session.add(author)
            self.db.session.flush()
        return author

    def _resolve_genre(self, name):
        genre = Genre.query.filter_by(name=name).first()
        if genre is None:
            if not self.auto_create_genres:
                raise ConflictError(f"Genre '{name}' does not exist.")
            genre = Genre(name=name)
            self.db.session.add(genre)
            self.db.session.flush()
            logger.info("Created genre %s", name)
        return genre

    # --- operations ---
    def list(self):
        try:
            rows = self._query().order_by(Book.created_at).all()
            return [self._to_record(b) for b in rows]
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            logger.error("Database error while fetching books: %s", exc)
            raise StorageError("Error fetching books") from exc

    def get(self, book_id):
        try:
            book = self.db.session.get(Book, book_id)
            if book is None:
                raise NotFoundError()
            return self._to_record(book)
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            logger.error("Database error while fetching book %s: %s", book_id, exc)
            raise StorageError("Error fetching book") from exc

    def add(self, candidate):
        fields = clean_book_input(candidate)
        with self._transaction("adding book") as session:
            if self._isbn_taken(fields["isbn"]):
                raise ConflictError(DUPLICATE_ISBN)
            book = Book(
                id=str(uuid4()),
                title=fields["title"],
                isbn=fields["isbn"],
                publication_date=fields["pub_date"],
                author=self._get_or_create_author(fields["author"]),
                genre=self._resolve_genre(fields["genre"]),
            )
            session.add(book)
            session.flush()
            record = self._to_record(book)
        logger.info("Book added: %s (%s)", record.title, record.id)
        return record

    def update(self, book_id, patch):
        with self._transaction("updating book") as session:
            book = session.get(Book, book_id)
            if book is None:
                raise NotFoundError()
            fields = clean_book_input(patch, partial=True)

            if "isbn" in fields and self._isbn_taken(fields["isbn"], exclude_id=book.id):
                raise ConflictError(DUPLICATE_ISBN)
            if "author" in fields:
                book.author = self._get_or_create_author(fields["author"])
            if "genre" in fields:
                book.genre = self._resolve_genre(fields["genre"])
            if "title" in fields:
                book.title = fields["title"]
            if "isbn" in fields:
                book.isbn = fields["isbn"]
            if "pub_date" in fields:
                book.publication_date = fields["pub_date"]

            session.flush()
            record = self._to_record(book)
        logger.info("Book updated: %s (%s)", record.title, record.id)
        return record

    def remove(self, book_id):
        with self._transaction("deleting book") as session:
            book = session.get(Book, book_id)
            if book is None:
                raise NotFoundError()
            title = book.title
            session.delete(book)
        logger.info("Book deleted: %s (%s)", title, book_id)
