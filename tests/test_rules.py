"""Tests for the pure integrity rules."""

from datetime import date

from models import Author, Book, Country, Review, constraints_of
from rules import (
    Allowed,
    CascadeRequired,
    Facts,
    Policy,
    Rejected,
    RejectedConflict,
    RejectedDuplicate,
    RejectedInvalid,
    RejectedNotFound,
    check_shape,
    evaluate_create,
    evaluate_delete,
    evaluate_update,
    natural_key,
    policy_for,
)

TEXT = "x" * 60


def _review(**overrides):
    values = {"headline": "Good enough book", "review_text": TEXT, "rating": 3, "book_id": 1, "reviewer_id": 1}
    values.update(overrides)
    return values


def test_constraints_are_read_from_the_model() -> None:
    found = constraints_of(Book)
    assert found["isbn"].min_length == 3
    assert found["isbn"].max_length == 10
    assert found["title"].max_length == 100
    assert found["date_published"].required is False
    assert found["author_ids"].min_items == 1
    assert "id" not in found


def test_shape_accepts_valid_review() -> None:
    assert check_shape(Review, _review()) == []


def test_shape_reports_every_bad_field() -> None:
    errors = check_shape(Review, _review(headline="short", review_text="too short", rating=9))
    fields = [e.field for e in errors]
    assert fields == ["headline", "review_text", "rating"]


def test_shape_requires_fields() -> None:
    errors = check_shape(Author, {"first_name": "  ", "last_name": None})
    assert {e.field for e in errors} == {"first_name", "last_name", "country_id"}
    assert all(e.reason == "is required" for e in errors)


def test_shape_rejects_non_integer_rating() -> None:
    errors = check_shape(Review, _review(rating=True))
    assert errors == [RejectedInvalid("rating", "must be an integer")]


def test_shape_length_is_measured_after_trimming() -> None:
    assert check_shape(Book, {"isbn": "  ab  ", "title": "T", "author_ids": [1], "category_ids": [1]}) == [
        RejectedInvalid("isbn", "must be between 3 and 10 characters")
    ]


def test_shape_requires_a_real_date() -> None:
    values = {"isbn": "ABC123", "title": "T", "author_ids": [1], "category_ids": [1]}

    assert check_shape(Book, dict(values, date_published="1862-04-03")) == [
        RejectedInvalid("date_published", "must be a date")
    ]
    assert check_shape(Book, dict(values, date_published=date(1862, 4, 3))) == []


def test_book_needs_an_author_and_a_category() -> None:
    errors = check_shape(Book, {"isbn": "ABC123", "title": "T", "author_ids": [1], "category_ids": []})
    assert [e.field for e in errors] == ["category_ids"]


def test_natural_key_is_trimmed_and_lowercased() -> None:
    assert natural_key({"first_name": " Victor ", "last_name": "HUGO"}, ("first_name", "last_name")) == (
        "victor",
        "hugo",
    )
    assert natural_key({"first_name": "Victor"}, ("first_name", "last_name")) is None


def test_create_allowed() -> None:
    assert evaluate_create(Country, "country", {"name": "France"}, Facts()) == Allowed()


def test_create_collects_reasons_in_fixed_order() -> None:
    facts = Facts(missing={"country": [7]}, duplicate_key=("victor", "hugo"))
    verdict = evaluate_create(Author, "author", {"first_name": "Victor", "last_name": "x" * 201, "country_id": 7}, facts)

    assert isinstance(verdict, Rejected)
    assert verdict.reasons == (
        RejectedInvalid("last_name", "cannot be more than 200 characters"),
        RejectedNotFound("country", 7),
        RejectedDuplicate("author", ("victor", "hugo")),
    )
    assert isinstance(verdict.primary, RejectedInvalid)


def test_update_id_mismatch_is_invalid_even_when_target_missing() -> None:
    verdict = evaluate_update(Country, "country", 1, {"id": 2, "name": "Spain"}, Facts(target_exists=False))

    assert isinstance(verdict, Rejected)
    assert verdict.primary == RejectedInvalid("id", "does not match the addressed id 1")
    assert RejectedNotFound("country", 1) in verdict.reasons


def test_update_requires_payload_id() -> None:
    verdict = evaluate_update(Country, "country", 1, {"name": "Spain"}, Facts())
    assert verdict.primary == RejectedInvalid("id", "is required")


def test_update_missing_target() -> None:
    verdict = evaluate_update(Country, "country", 4, {"id": 4, "name": "Spain"}, Facts(target_exists=False))
    assert verdict == Rejected((RejectedNotFound("country", 4),))


def test_review_update_checks_book_and_reviewer_separately() -> None:
    facts = Facts(missing={"reviewer": [9]})
    verdict = evaluate_update(Review, "review", 1, _review(id=1, reviewer_id=9), facts)
    assert verdict == Rejected((RejectedNotFound("reviewer", 9),))


def test_delete_policies() -> None:
    assert policy_for("country", "author") is Policy.PROTECT
    assert policy_for("author", "book") is Policy.PROTECT
    assert policy_for("category", "book") is Policy.PROTECT
    assert policy_for("book", "review") is Policy.CASCADE
    assert policy_for("reviewer", "review") is Policy.CASCADE
    assert policy_for("review", "anything") is Policy.PROTECT


def test_delete_missing_target() -> None:
    verdict = evaluate_delete("author", 3, Facts(target_exists=False, dependents={"book": [1]}))
    assert verdict == Rejected((RejectedNotFound("author", 3),))


def test_delete_protected_dependents_conflict() -> None:
    verdict = evaluate_delete("country", 1, Facts(dependents={"author": [1, 2]}))
    assert verdict == Rejected((RejectedConflict("country", "country 1 is referenced by 2 author(s)"),))


def test_delete_cascading_dependents() -> None:
    verdict = evaluate_delete("book", 1, Facts(dependents={"review": [4, 5]}))
    assert verdict == Allowed((CascadeRequired("review", (4, 5)),))


def test_delete_without_dependents() -> None:
    assert evaluate_delete("category", 1, Facts(dependents={"book": []})) == Allowed()
