"""
=============================================================
Models
=============================================================
This file defines the SQLAlchemy ORM models.
Each class maps to a table. Relations are plain foreign keys and association
tables; `dal.py` walks them with explicit joins.

- Country -> Author            (authors come from one country)
- Book <-> Author              (many-to-many via book_authors)
- Book <-> Category            (many-to-many via book_categories)
- Reviewer -> Review -> Book   (reviewers write reviews on books)

Conventions:
- Field bounds live on the column as `info={"constraint": Constraint(...)}`.
  They are checked by `rules.py` before any write; the database does not
  enforce lengths or ranges.
- Natural keys are unique on lower(...) so case variants collide in the store
  as well as in the rule checks.
- No ORM cascades: which deletes cascade and which are refused is decided by
  the policy table in `rules.py`, and `dal.py` issues the deletes.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional
from sqlalchemy import Date, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


@dataclass(frozen=True)
class Constraint:
    """Declared bounds for one field."""
    required: bool = True
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    min_items: Optional[int] = None
    type_: Optional[type] = None


def rule(**bounds: Any) -> Dict[str, Constraint]:
    """Column `info` payload carrying a Constraint."""
    return {"constraint": Constraint(**bounds)}


class Base(DeclarativeBase):
    pass


class Country(Base):
    """
    A country authors come from.
    Columns:
    - id: PK
    - name: unique (case-insensitive)

    Referenced by:
    - authors.country_id (protected: a country with authors cannot be deleted)
    """
    __tablename__ = "countries"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, info=rule())


class Author(Base):
    """
    Represents a book author.
    Columns:
    - id: PK
    - first_name (<= 100), last_name (<= 200): unique as a pair (case-insensitive)
    - country_id: FK -> countries.id
    Linked to books through book_authors.
    """
    __tablename__ = "authors"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), info=rule(max_length=100))
    last_name: Mapped[str] = mapped_column(String(200), info=rule(max_length=200))
    country_id: Mapped[int] = mapped_column(ForeignKey("countries.id"), index=True, info=rule())


class Category(Base):
    """
    A category/genre for books (e.g., 'Science Fiction').
    Columns:
    - id: PK
    - name: unique (case-insensitive)
    Linked to books through book_categories.
    """
    __tablename__ = "categories"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, info=rule())


class Book(Base):
    """
    Central entity: a book in the catalog.

    Columns:
    - id: PK
    - isbn: 3..10 chars, unique (case-insensitive)
    - title: <= 100 chars
    - date_published: optional

    Links:
    - book_authors, book_categories (at least one of each)
    - reviews.book_id (cascaded on delete)
    """
    __tablename__ = "books"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    isbn: Mapped[str] = mapped_column(String(10), info=rule(min_length=3, max_length=10))
    title: Mapped[str] = mapped_column(String(100), info=rule(max_length=100))
    date_published: Mapped[Optional[date]] = mapped_column(Date, info=rule(required=False, type_=date))

    # Link fields are not columns; they travel with the book on create/update.
    __link_constraints__ = {
        "author_ids": Constraint(min_items=1),
        "category_ids": Constraint(min_items=1),
    }


class BookAuthor(Base):
    """
    Association table linking Books to Authors (many-to-many).
    Composite primary key: (book_id, author_id).
    """
    __tablename__ = "book_authors"
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id"), primary_key=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("authors.id"), primary_key=True, index=True)


class BookCategory(Base):
    """
    Association table linking Books to Categories (many-to-many).
    Composite primary key: (book_id, category_id).
    """
    __tablename__ = "book_categories"
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id"), primary_key=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), primary_key=True, index=True)


class Reviewer(Base):
    """
    Someone who writes reviews.
    Columns:
    - id: PK
    - first_name, last_name: unique as a pair (case-insensitive)

    Referenced by:
    - reviews.reviewer_id (cascaded on delete)
    """
    __tablename__ = "reviewers"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), info=rule(max_length=100))
    last_name: Mapped[str] = mapped_column(String(200), info=rule(max_length=200))


class Review(Base):
    """
    A reviewer's opinion of a Book.

    Columns:
    - id: PK
    - headline: 10..200 chars
    - review_text: 50..2000 chars
    - rating: integer in [1..5]
    - book_id: FK -> books.id
    - reviewer_id: FK -> reviewers.id
    """
    __tablename__ = "reviews"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    headline: Mapped[str] = mapped_column(String(200), info=rule(min_length=10, max_length=200))
    review_text: Mapped[str] = mapped_column(String(2000), info=rule(min_length=50, max_length=2000))
    rating: Mapped[int] = mapped_column(Integer, info=rule(min_value=1, max_value=5))
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id"), index=True, info=rule())
    reviewer_id: Mapped[int] = mapped_column(ForeignKey("reviewers.id"), index=True, info=rule())


# Natural keys: unique regardless of case.
Index("uq_countries_name", func.lower(Country.__table__.c.name), unique=True)
Index("uq_categories_name", func.lower(Category.__table__.c.name), unique=True)
Index("uq_books_isbn", func.lower(Book.__table__.c.isbn), unique=True)
Index("uq_authors_name", func.lower(Author.__table__.c.first_name), func.lower(Author.__table__.c.last_name), unique=True)
Index("uq_reviewers_name", func.lower(Reviewer.__table__.c.first_name), func.lower(Reviewer.__table__.c.last_name), unique=True)


def constraints_of(model: type) -> Dict[str, Constraint]:
    """All declared constraints for `model`: column bounds plus link bounds."""
    found: Dict[str, Constraint] = {}
    for column in model.__table__.columns:
        constraint = column.info.get("constraint")
        if constraint is not None:
            found[column.key] = constraint
    found.update(getattr(model, "__link_constraints__", {}))
    return found


def to_dict(row: Base) -> Dict[str, Any]:
    return {attr.key: getattr(row, attr.key) for attr in row.__mapper__.column_attrs}
