"""Tests for the HTTP endpoints and the outcome -> status mapping."""

from fastapi.testclient import TestClient

from conftest import LONG_TEXT


def _seed(client: TestClient):
    country = client.post("/api/countries", json={"name": "France"}).json()
    author = client.post(
        "/api/authors",
        json={"first_name": "Victor", "last_name": "Hugo", "country_id": country["id"]},
    ).json()
    category = client.post("/api/categories", json={"name": "Novel"}).json()
    return country, author, category


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_create_and_get_country(client: TestClient) -> None:
    response = client.post("/api/countries", json={"name": "  France "})

    assert response.status_code == 201
    created = response.json()
    assert created["name"] == "France"

    response = client.get(f"/api/countries/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


def test_list_countries_empty(client: TestClient) -> None:
    response = client.get("/api/countries")
    assert response.status_code == 200
    assert response.json() == []


def test_duplicate_is_422(client: TestClient) -> None:
    client.post("/api/categories", json={"name": "Novel"})
    response = client.post("/api/categories", json={"name": "novel"})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "DUPLICATE"


def test_missing_is_404(client: TestClient) -> None:
    response = client.get("/api/books/42")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "book 42 does not exist"


def test_invalid_is_400_with_field_details(client: TestClient) -> None:
    response = client.post("/api/authors", json={"first_name": "x" * 101})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID"
    assert {d["field"] for d in error["details"]} == {"first_name", "last_name", "country_id"}


def test_unparseable_body_is_400(client: TestClient) -> None:
    response = client.post("/api/reviews", json={"rating": "five"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID"


def test_update_id_mismatch_is_400(client: TestClient) -> None:
    country, _, _ = _seed(client)
    response = client.put(f"/api/countries/{country['id']}", json={"id": country["id"] + 1, "name": "Spain"})
    assert response.status_code == 400


def test_update_is_204(client: TestClient) -> None:
    country, _, _ = _seed(client)

    response = client.put(f"/api/countries/{country['id']}", json={"id": country["id"], "name": "République"})

    assert response.status_code == 204
    assert client.get(f"/api/countries/{country['id']}").json()["name"] == "République"


def test_book_without_categories_is_rejected(client: TestClient) -> None:
    _, author, _ = _seed(client)

    response = client.post(
        "/api/books",
        json={"isbn": "ABC123", "title": "Les Misérables", "author_ids": [author["id"]], "category_ids": []},
    )

    assert response.status_code == 400
    assert client.get("/api/books").json() == []


def test_delete_author_with_book_conflicts_until_book_is_gone(client: TestClient) -> None:
    _, author, category = _seed(client)
    book = client.post(
        "/api/books",
        json={
            "isbn": "ABC123",
            "title": "Les Misérables",
            "date_published": "1862-04-03",
            "author_ids": [author["id"]],
            "category_ids": [category["id"]],
        },
    ).json()
    assert book["date_published"] == "1862-04-03"

    response = client.delete(f"/api/authors/{author['id']}")
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"

    assert client.delete(f"/api/books/{book['id']}").status_code == 204
    assert client.delete(f"/api/authors/{author['id']}").status_code == 204
    assert client.get(f"/api/authors/{author['id']}").status_code == 404


def test_review_flow(client: TestClient) -> None:
    _, author, category = _seed(client)
    book = client.post(
        "/api/books",
        json={"isbn": "ABC123", "title": "Les Misérables", "author_ids": [author["id"]], "category_ids": [category["id"]]},
    ).json()
    reviewer = client.post("/api/reviewers", json={"first_name": "Jane", "last_name": "Doe"}).json()

    response = client.post(
        "/api/reviews",
        json={
            "headline": "A towering classic",
            "review_text": LONG_TEXT,
            "rating": 4,
            "book_id": book["id"],
            "reviewer_id": reviewer["id"],
        },
    )
    assert response.status_code == 201
    review = response.json()

    assert client.get(f"/api/reviews/books/{book['id']}").json() == [review]
    assert client.get(f"/api/reviewers/{reviewer['id']}/reviews").json() == [review]
    assert client.get(f"/api/reviews/{review['id']}/book").json()["id"] == book["id"]
    assert client.get(f"/api/reviews/{review['id']}/reviewer").json()["id"] == reviewer["id"]
    assert client.get(f"/api/books/{book['id']}/rating").json() == {
        "book_id": book["id"],
        "rating": 4.0,
        "reviews": 1,
    }

    assert client.delete(f"/api/reviewers/{reviewer['id']}").status_code == 204
    assert client.get(f"/api/reviews/{review['id']}").status_code == 404


def test_relationship_routes(client: TestClient) -> None:
    country, author, category = _seed(client)
    book = client.post(
        "/api/books",
        json={"isbn": "ABC123", "title": "Les Misérables", "author_ids": [author["id"]], "category_ids": [category["id"]]},
    ).json()

    assert client.get(f"/api/countries/{country['id']}/authors").json() == [author]
    assert client.get(f"/api/countries/authors/{author['id']}").json() == country
    assert client.get(f"/api/authors/{author['id']}/books").json() == [book]
    assert client.get(f"/api/authors/books/{book['id']}").json() == [author]
    assert client.get(f"/api/categories/{category['id']}/books").json() == [book]
    assert client.get(f"/api/categories/books/{book['id']}").json() == [category]
    assert client.get("/api/books/isbn/abc123").json() == book


def test_protected_country_delete(client: TestClient) -> None:
    country, _, _ = _seed(client)

    assert client.delete(f"/api/countries/{country['id']}").status_code == 409
    assert len(client.get("/api/countries").json()) == 1


def test_ids_beyond_64_bits_are_404(client: TestClient) -> None:
    huge = 99999999999999999999

    assert client.get(f"/api/countries/{huge}").status_code == 404
    assert client.delete(f"/api/books/{huge}").status_code == 404
    assert client.get(f"/api/reviews/{huge}/book").status_code == 404
