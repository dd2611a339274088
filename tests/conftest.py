"""Pytest configuration and fixtures."""

from typing import Any, Dict, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api import get_catalog
from app import app
from dal import Catalog
from db import make_engine, make_session_factory
from init_db import create_schema

LONG_TEXT = "A sweeping story of justice, mercy and redemption in nineteenth-century France."


@pytest.fixture
def engine(tmp_path) -> Iterator[Engine]:
    """A fresh SQLite file database per test."""
    eng = make_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def catalog(engine: Engine) -> Catalog:
    return Catalog(make_session_factory(engine))


@pytest.fixture
def client(catalog: Catalog) -> Iterator[TestClient]:
    """HTTP client bound to the per-test catalog. Lifespan is not run."""
    app.dependency_overrides[get_catalog] = lambda: catalog
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

@pytest.fixture
def france(catalog: Catalog) -> Dict[str, Any]:
    return catalog.countries.create({"name": "France"}).payload


@pytest.fixture
def hugo(catalog: Catalog, france) -> Dict[str, Any]:
    return catalog.authors.create(
        {"first_name": "Victor", "last_name": "Hugo", "country_id": france["id"]}
    ).payload


@pytest.fixture
def novel(catalog: Catalog) -> Dict[str, Any]:
    return catalog.categories.create({"name": "Novel"}).payload


@pytest.fixture
def miserables(catalog: Catalog, hugo, novel) -> Dict[str, Any]:
    return catalog.books.create({
        "isbn": "ABC123",
        "title": "Les Misérables",
        "author_ids": [hugo["id"]],
        "category_ids": [novel["id"]],
    }).payload


@pytest.fixture
def reviewer(catalog: Catalog) -> Dict[str, Any]:
    return catalog.reviewers.create({"first_name": "Jane", "last_name": "Doe"}).payload


def review_values(book_id: int, reviewer_id: int, **overrides: Any) -> Dict[str, Any]:
    values = {
        "headline": "A towering classic",
        "review_text": LONG_TEXT,
        "rating": 5,
        "book_id": book_id,
        "reviewer_id": reviewer_id,
    }
    values.update(overrides)
    return values


@pytest.fixture
def review(catalog: Catalog, miserables, reviewer) -> Dict[str, Any]:
    return catalog.reviews.create(review_values(miserables["id"], reviewer["id"])).payload
