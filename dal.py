# dal.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

import rules
from db import SessionLocal, get_session
from models import (
    Author,
    Book,
    BookAuthor,
    BookCategory,
    Category,
    Country,
    Review,
    Reviewer,
    to_dict,
)
from outcomes import (
    Conflict,
    Created,
    Deleted,
    Duplicate,
    NotFound,
    Ok,
    Outcome,
    StorageFailure,
    Updated,
    from_rejection,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Entity families
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Reference:
    """A required parent named by a column of the candidate (e.g. Author.country_id)."""
    field: str
    kind: str
    model: type


@dataclass(frozen=True)
class Link:
    """
    A many-to-many association written together with its owner.
    `field` is the candidate key holding the target ids (e.g. "author_ids").
    """
    field: str
    kind: str
    model: type
    join: type
    owner_column: str
    target_column: str


@dataclass(frozen=True)
class Dependent:
    """
    Rows that point at the owner: `column` is the pointer, `id_column` is what
    identifies each dependent (for join tables, the other side's id).
    """
    kind: str
    column: Any
    id_column: Any


@dataclass(frozen=True)
class Family:
    kind: str
    model: type
    natural_key: Tuple[str, ...] = ()
    references: Tuple[Reference, ...] = ()
    links: Tuple[Link, ...] = ()
    dependents: Tuple[Dependent, ...] = ()


COUNTRIES = Family(
    kind="country",
    model=Country,
    natural_key=("name",),
    dependents=(Dependent("author", Author.country_id, Author.id),),
)

AUTHORS = Family(
    kind="author",
    model=Author,
    natural_key=("first_name", "last_name"),
    references=(Reference("country_id", "country", Country),),
    dependents=(Dependent("book", BookAuthor.author_id, BookAuthor.book_id),),
)

CATEGORIES = Family(
    kind="category",
    model=Category,
    natural_key=("name",),
    dependents=(Dependent("book", BookCategory.category_id, BookCategory.book_id),),
)

BOOKS = Family(
    kind="book",
    model=Book,
    natural_key=("isbn",),
    links=(
        Link("author_ids", "author", Author, BookAuthor, "book_id", "author_id"),
        Link("category_ids", "category", Category, BookCategory, "book_id", "category_id"),
    ),
    dependents=(Dependent("review", Review.book_id, Review.id),),
)

REVIEWERS = Family(
    kind="reviewer",
    model=Reviewer,
    natural_key=("first_name", "last_name"),
    dependents=(Dependent("review", Review.reviewer_id, Review.id),),
)

REVIEWS = Family(
    kind="review",
    model=Review,
    references=(
        Reference("book_id", "book", Book),
        Reference("reviewer_id", "reviewer", Reviewer),
    ),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _clean(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of `values` with surrounding whitespace stripped from strings."""
    return {k: (v.strip() if isinstance(v, str) else v) for k, v in values.items()}


def _unique_ids(ids: Sequence[int]) -> List[int]:
    return list(dict.fromkeys(ids))


# Row ids are signed 64-bit integers; nothing outside this range is stored.
MIN_ID = -(2 ** 63)
MAX_ID = 2 ** 63 - 1


def _storable_id(value: Any) -> bool:
    """Whether `value` can name a row at all; anything else cannot exist."""
    return isinstance(value, int) and not isinstance(value, bool) and MIN_ID <= value <= MAX_ID


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(orig).lower()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class Repository:
    """
    Reads and writes for one entity family.

    Every mutation runs inside a single `get_session()` scope: facts are read,
    `rules` decides, and only an Allowed verdict writes. Anything the store
    raises rolls the whole scope back.
    """

    def __init__(self, family: Family, session_factory: Callable[[], Session] = SessionLocal):
        self.family = family
        self.session_factory = session_factory

    @property
    def model(self) -> type:
        return self.family.model

    # ----- reads -------------------------------------------------------------

    def list(self) -> List[Dict[str, Any]]:
        with get_session(self.session_factory) as s:
            rows = s.execute(select(self.model).order_by(self.model.id)).scalars().all()
            return [self._render(s, row) for row in rows]

    def get(self, entity_id: int) -> Outcome:
        if not _storable_id(entity_id):
            return self._not_found(entity_id)
        with get_session(self.session_factory) as s:
            row = s.get(self.model, entity_id)
            if row is None:
                return self._not_found(entity_id)
            return Ok(self._render(s, row))

    def exists(self, entity_id: int) -> bool:
        with get_session(self.session_factory) as s:
            return self._exists(s, entity_id)

    def exists_by_natural_key(self, *parts: str, exclude_id: Optional[int] = None) -> bool:
        if not self.family.natural_key:
            raise ValueError(f"{self.family.kind} has no natural key")
        if len(parts) != len(self.family.natural_key):
            raise ValueError(
                f"{self.family.kind} natural key has {len(self.family.natural_key)} part(s), got {len(parts)}"
            )
        values = dict(zip(self.family.natural_key, parts))
        key = rules.natural_key(values, self.family.natural_key)
        if key is None:
            return False
        with get_session(self.session_factory) as s:
            return self._key_taken(s, key, exclude_id)

    # ----- writes ------------------------------------------------------------

    def create(self, values: Mapping[str, Any]) -> Outcome:
        values = _clean(values)

        def work(s: Session) -> Outcome:
            facts = self._facts(s, values)
            verdict = rules.evaluate_create(self.model, self.family.kind, values, facts)
            if isinstance(verdict, rules.Rejected):
                return self._rejected("create", verdict)

            row = self.model(**self._columns(values))
            s.add(row)
            s.flush()  # row.id is needed for join rows
            self._write_links(s, row.id, values)
            return Created(self._render(s, row))

        return self._transact("create", work)

    def update(self, entity_id: int, values: Mapping[str, Any]) -> Outcome:
        values = _clean(values)

        def work(s: Session) -> Outcome:
            facts = self._facts(s, values, exclude_id=entity_id)
            facts.target_exists = self._exists(s, entity_id)
            verdict = rules.evaluate_update(self.model, self.family.kind, entity_id, values, facts)
            if isinstance(verdict, rules.Rejected):
                return self._rejected("update", verdict)

            row = s.get(self.model, entity_id)
            for key, value in self._columns(values).items():
                setattr(row, key, value)
            for link in self.family.links:
                s.execute(delete(link.join).where(getattr(link.join, link.owner_column) == entity_id))
            s.flush()
            self._write_links(s, entity_id, values)
            return Updated(self._render(s, row))

        return self._transact("update", work)

    def delete(self, entity_id: int) -> Outcome:
        def work(s: Session) -> Outcome:
            target_exists = self._exists(s, entity_id)
            facts = rules.Facts(
                target_exists=target_exists,
                dependents=self._dependents(s, entity_id) if target_exists else {},
            )
            verdict = rules.evaluate_delete(self.family.kind, entity_id, facts)
            if isinstance(verdict, rules.Rejected):
                return self._rejected("delete", verdict)

            for cascade in verdict.cascades:
                dep = self._dependent(cascade.child_kind)
                s.execute(delete(dep.column.class_).where(dep.column == entity_id))
            for link in self.family.links:
                s.execute(delete(link.join).where(getattr(link.join, link.owner_column) == entity_id))
            s.execute(delete(self.model).where(self.model.id == entity_id))
            return Deleted()

        return self._transact("delete", work)

    # ----- internals ---------------------------------------------------------

    def _transact(self, action: str, work: Callable[[Session], Outcome]) -> Outcome:
        kind = self.family.kind
        try:
            with get_session(self.session_factory) as s:
                outcome = work(s)
        except IntegrityError as exc:
            logger.warning("%s %s rejected by the store: %s", action, kind, exc.orig)
            if _is_unique_violation(exc):
                return Duplicate(f"{kind} already exists")
            return Conflict(f"{kind} {action} violates a reference: {exc.orig}")
        except SQLAlchemyError as exc:
            logger.error("%s %s failed: %s", action, kind, exc)
            return StorageFailure(f"Something went wrong while trying to {action} {kind}")
        if isinstance(outcome, Ok):
            logger.info("%s %s committed", action, kind)
        return outcome

    def _rejected(self, action: str, verdict: rules.Rejected) -> Outcome:
        outcome = from_rejection(verdict)
        logger.info("%s %s rejected: %s", action, self.family.kind, outcome.message)
        return outcome

    def _not_found(self, entity_id: Any) -> NotFound:
        return NotFound(f"{self.family.kind} {entity_id} does not exist")

    def _columns(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        keys = {attr.key for attr in self.model.__mapper__.column_attrs} - {"id"}
        return {k: v for k, v in values.items() if k in keys}

    def _exists(self, s: Session, entity_id: Any) -> bool:
        return _count(s, self.model, entity_id) > 0

    def _key_taken(self, s: Session, key: Tuple[str, ...], exclude_id: Optional[int]) -> bool:
        stmt = select(func.count()).select_from(self.model)
        for name, part in zip(self.family.natural_key, key):
            stmt = stmt.where(func.lower(getattr(self.model, name)) == part)
        if exclude_id is not None and _storable_id(exclude_id):
            stmt = stmt.where(self.model.id != exclude_id)
        return int(s.scalar(stmt) or 0) > 0

    def _facts(self, s: Session, values: Mapping[str, Any], exclude_id: Optional[int] = None) -> rules.Facts:
        missing: Dict[str, List[Any]] = {}
        for ref in self.family.references:
            ref_id = values.get(ref.field)
            if ref_id is not None and _count(s, ref.model, ref_id) == 0:
                missing.setdefault(ref.kind, []).append(ref_id)
        for link in self.family.links:
            ids = values.get(link.field)
            if not isinstance(ids, (list, tuple)):
                continue
            ids = _unique_ids(ids)
            storable = [i for i in ids if _storable_id(i)]
            found = set(s.scalars(select(link.model.id).where(link.model.id.in_(storable))))
            absent = [i for i in ids if i not in found]
            if absent:
                missing.setdefault(link.kind, []).extend(absent)

        duplicate_key = None
        key = rules.natural_key(values, self.family.natural_key)
        if key is not None and self._key_taken(s, key, exclude_id):
            duplicate_key = key
        return rules.Facts(missing=missing, duplicate_key=duplicate_key)

    def _dependents(self, s: Session, entity_id: int) -> Dict[str, List[int]]:
        found: Dict[str, List[int]] = {}
        for dep in self.family.dependents:
            ids = s.scalars(select(dep.id_column).where(dep.column == entity_id)).all()
            found[dep.kind] = list(ids)
        return found

    def _dependent(self, kind: str) -> Dependent:
        for dep in self.family.dependents:
            if dep.kind == kind:
                return dep
        raise KeyError(f"{self.family.kind} has no dependent {kind!r}")

    def _write_links(self, s: Session, owner_id: int, values: Mapping[str, Any]) -> None:
        for link in self.family.links:
            ids = _unique_ids(values.get(link.field) or [])
            if ids:
                s.execute(
                    insert(link.join),
                    [{link.owner_column: owner_id, link.target_column: i} for i in ids],
                )

    def _render(self, s: Session, row: Any) -> Dict[str, Any]:
        data = to_dict(row)
        for link in self.family.links:
            owner = getattr(link.join, link.owner_column)
            target = getattr(link.join, link.target_column)
            data[link.field] = list(
                s.scalars(select(target).where(owner == row.id).order_by(target))
            )
        return data


def _count(s: Session, model: type, entity_id: Any) -> int:
    if not _storable_id(entity_id):
        return 0
    return int(s.scalar(select(func.count()).select_from(model).where(model.id == entity_id)) or 0)


# ---------------------------------------------------------------------------
# Catalog: all six families plus the relationship reads
# ---------------------------------------------------------------------------

class Catalog:
    """
    Entry point used by the HTTP layer. Holds nothing but the session factory;
    each call opens its own session.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory
        self.countries = Repository(COUNTRIES, session_factory)
        self.authors = Repository(AUTHORS, session_factory)
        self.categories = Repository(CATEGORIES, session_factory)
        self.books = Repository(BOOKS, session_factory)
        self.reviewers = Repository(REVIEWERS, session_factory)
        self.reviews = Repository(REVIEWS, session_factory)

    def _related(self, anchor: Repository, anchor_id: int, target: Repository, stmt) -> Outcome:
        """Rows of `target` selected by `stmt`, or NotFound when the anchor is missing."""
        with get_session(self.session_factory) as s:
            if not anchor._exists(s, anchor_id):
                return anchor._not_found(anchor_id)
            rows = s.execute(stmt).scalars().all()
            return Ok([target._render(s, row) for row in rows])

    def _parent(self, anchor: Repository, anchor_id: int, target: Repository, fk: str) -> Outcome:
        if not _storable_id(anchor_id):
            return anchor._not_found(anchor_id)
        with get_session(self.session_factory) as s:
            row = s.get(anchor.model, anchor_id)
            if row is None:
                return anchor._not_found(anchor_id)
            parent = s.get(target.model, getattr(row, fk))
            return Ok(target._render(s, parent))

    # Countries / authors

    def authors_of_country(self, country_id: int) -> Outcome:
        stmt = select(Author).where(Author.country_id == country_id).order_by(Author.id)
        return self._related(self.countries, country_id, self.authors, stmt)

    def country_of_author(self, author_id: int) -> Outcome:
        return self._parent(self.authors, author_id, self.countries, "country_id")

    # Books / authors / categories

    def books_of_author(self, author_id: int) -> Outcome:
        stmt = (
            select(Book)
            .join(BookAuthor, BookAuthor.book_id == Book.id)
            .where(BookAuthor.author_id == author_id)
            .order_by(Book.id)
        )
        return self._related(self.authors, author_id, self.books, stmt)

    def authors_of_book(self, book_id: int) -> Outcome:
        stmt = (
            select(Author)
            .join(BookAuthor, BookAuthor.author_id == Author.id)
            .where(BookAuthor.book_id == book_id)
            .order_by(Author.id)
        )
        return self._related(self.books, book_id, self.authors, stmt)

    def books_of_category(self, category_id: int) -> Outcome:
        stmt = (
            select(Book)
            .join(BookCategory, BookCategory.book_id == Book.id)
            .where(BookCategory.category_id == category_id)
            .order_by(Book.id)
        )
        return self._related(self.categories, category_id, self.books, stmt)

    def categories_of_book(self, book_id: int) -> Outcome:
        stmt = (
            select(Category)
            .join(BookCategory, BookCategory.category_id == Category.id)
            .where(BookCategory.book_id == book_id)
            .order_by(Category.id)
        )
        return self._related(self.books, book_id, self.categories, stmt)

    def book_by_isbn(self, isbn: str) -> Outcome:
        with get_session(self.session_factory) as s:
            row = s.scalar(select(Book).where(func.lower(Book.isbn) == isbn.strip().lower()))
            if row is None:
                return NotFound(f"book with isbn '{isbn}' does not exist")
            return Ok(self.books._render(s, row))

    def book_rating(self, book_id: int) -> Outcome:
        """
        Average rating of a book. Returns {book_id, rating, reviews}; rating
        is None when the book has no reviews yet.
        """
        with get_session(self.session_factory) as s:
            if not self.books._exists(s, book_id):
                return self.books._not_found(book_id)
            avg, n = s.execute(
                select(func.avg(Review.rating), func.count(Review.id)).where(Review.book_id == book_id)
            ).one()
            return Ok({
                "book_id": book_id,
                "rating": float(avg) if avg is not None else None,
                "reviews": int(n),
            })

    # Reviews / reviewers

    def reviews_of_book(self, book_id: int) -> Outcome:
        stmt = select(Review).where(Review.book_id == book_id).order_by(Review.id)
        return self._related(self.books, book_id, self.reviews, stmt)

    def book_of_review(self, review_id: int) -> Outcome:
        return self._parent(self.reviews, review_id, self.books, "book_id")

    def reviews_of_reviewer(self, reviewer_id: int) -> Outcome:
        stmt = select(Review).where(Review.reviewer_id == reviewer_id).order_by(Review.id)
        return self._related(self.reviewers, reviewer_id, self.reviews, stmt)

    def reviewer_of_review(self, review_id: int) -> Outcome:
        return self._parent(self.reviews, review_id, self.reviewers, "reviewer_id")
