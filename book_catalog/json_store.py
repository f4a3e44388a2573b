"""File-backed catalog: the whole collection as one JSON array on disk.

The file is rewritten wholesale after every mutation. If a write fails the
in-memory change is undone so memory and disk never disagree. A file that
exists but cannot be read back in full is refused rather than overwritten.
"""

import json
import logging
from datetime import date
from pathlib import Path
from uuid import uuid4

from .catalog import DUPLICATE_ISBN, BookCatalog
from .dates import parse_pub_date
from .errors import ConflictError, NotFoundError, StorageError
from .genres import normalize_genre
from .validation import clean_book_input

logger = logging.getLogger(__name__)


def _entry_to_wire(entry):
    return {
        "id": entry["id"],
        "title": entry["title"],
        "author": entry["author"],
        "isbn": entry["isbn"],
        "pubDate": entry["pub_date"].isoformat(),
        "genre": entry["genre"],
    }


def _entry_from_wire(raw):
    """Parse one stored book; returns None for entries that can't be used."""
    if not isinstance(raw, dict):
        return None
    try:
        entry = {
            "id": str(raw["id"]),
            "title": str(raw["title"]),
            "author": str(raw["author"]),
            "isbn": str(raw["isbn"]),
            "pub_date": parse_pub_date(raw["pubDate"]),
            "genre": normalize_genre(raw["genre"]),
        }
    except (KeyError, TypeError, ValueError):
        return None
    if entry["genre"] is None:
        return None
    return entry


class JsonFileCatalog(BookCatalog):

    def __init__(self, path, today=date.today):
        super().__init__(today)
        self.path = Path(path)
        self._books = self._load()

    def _load(self):
        if not self.path.exists():
            logger.info("No catalog file at %s, starting with an empty list", self.path)
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Could not read %s: %s", self.path, exc)
            raise StorageError(f"Error reading {self.path}") from exc
        if not isinstance(raw, list):
            logger.error("%s does not hold a JSON array", self.path)
            raise StorageError(f"Error reading {self.path}: expected a JSON array")

        books = []
        ids, isbns = set(), set()
        for position, item in enumerate(raw):
            entry = _entry_from_wire(item)
            problem = None
            if entry is None:
                problem = "malformed book entry"
            elif entry["id"] in ids:
                problem = f"duplicate id {entry['id']}"
            elif entry["isbn"] in isbns:
                problem = f"duplicate isbn {entry['isbn']}"
            if problem:
                logger.error("%s, entry %d: %s", self.path, position, problem)
                raise StorageError(f"Error reading {self.path}: {problem} at entry {position}")
            ids.add(entry["id"])
            isbns.add(entry["isbn"])
            books.append(entry)
        logger.info("Loaded %d books from %s", len(books), self.path)
        return books

    def _write(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump([_entry_to_wire(e) for e in self._books], f, ensure_ascii=False, indent=2)

    def _commit(self, books, action):
        previous = self._books
        self._books = books
        try:
            self._write()
        except (OSError, TypeError, ValueError) as exc:
            self._books = previous
            logger.error("Failed to write %s while %s: %s", self.path, action, exc)
            raise StorageError(f"Error {action}") from exc

    def _index(self, book_id):
        for i, entry in enumerate(self._books):
            if entry["id"] == book_id:
                return i
        raise NotFoundError()

    def _isbn_taken(self, isbn, exclude_id=None):
        return any(e["isbn"] == isbn and e["id"] != exclude_id for e in self._books)

    def _to_record(self, entry):
        return self._record(
            entry["id"], entry["title"], entry["author"], entry["isbn"],
            entry["pub_date"], entry["genre"],
        )

    def list(self):
        return [self._to_record(e) for e in self._books]

    def get(self, book_id):
        return self._to_record(self._books[self._index(book_id)])

    def add(self, candidate):
        fields = clean_book_input(candidate)
        if self._isbn_taken(fields["isbn"]):
            raise ConflictError(DUPLICATE_ISBN)
        entry = dict(fields, id=str(uuid4()))
        self._commit(self._books + [entry], "adding book")
        logger.info("Book added: %s (%s)", entry["title"], entry["id"])
        return self._to_record(entry)

    def update(self, book_id, patch):
        index = self._index(book_id)
        fields = clean_book_input(patch, partial=True)
        if "isbn" in fields and self._isbn_taken(fields["isbn"], exclude_id=book_id):
            raise ConflictError(DUPLICATE_ISBN)

        updated = dict(self._books[index], **fields)
        books = list(self._books)
        books[index] = updated
        self._commit(books, "updating book")
        logger.info("Book updated: %s (%s)", updated["title"], book_id)
        return self._to_record(updated)

    def remove(self, book_id):
        index = self._index(book_id)
        removed = self._books[index]
        self._commit(self._books[:index] + self._books[index + 1:], "deleting book")
        logger.info("Book deleted: %s (%s)", removed["title"], book_id)
