from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


# --- Models ---
class Genre(db.Model):
    __tablename__ = 'genres'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    books = db.relationship('Book', back_populates='genre')

    def __repr__(self):
        return f"<Genre {self.name}>"


class Author(db.Model):
    __tablename__ = 'authors'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    books = db.relationship('Book', back_populates='author')

    def __repr__(self):
        return f"<Author {self.name}>"


class Book(db.Model):
    __tablename__ = 'books'
    id = db.Column(db.String(36), primary_key=True)
    title = db.Column(db.String(500), nullable=False, index=True)
    isbn = db.Column(db.String(20), nullable=False, unique=True)
    publication_date = db.Column(db.Date, nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('authors.id', ondelete='RESTRICT'), nullable=False)
    genre_id = db.Column(db.Integer, db.ForeignKey('genres.id', ondelete='RESTRICT'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow, index=True)

    author = db.relationship('Author', back_populates='books')
    genre = db.relationship('Genre', back_populates='books')

    def __repr__(self):
        return f"<Book {self.id} {self.title!r}>"
