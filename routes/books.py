"""
Book endpoints under /api/books.

Books are written together with their author and category links; the body
carries `author_ids` and `category_ids` and both must name at least one
existing row.
"""

from typing import List

from fastapi import APIRouter, Depends

from api import get_catalog, render, render_list
from dal import Catalog
from schemas import BookIn, BookOut, RatingOut

router = APIRouter(prefix="/api/books", tags=["books"])


@router.get("", response_model=List[BookOut])
def list_books(catalog: Catalog = Depends(get_catalog)):
    return render_list(catalog.books.list())


@router.get("/isbn/{isbn}", response_model=BookOut)
def get_book_by_isbn(isbn: str, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.book_by_isbn(isbn))


@router.get("/{book_id}", response_model=BookOut)
def get_book(book_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.books.get(book_id))


@router.get("/{book_id}/rating", response_model=RatingOut)
def get_book_rating(book_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.book_rating(book_id))


@router.post("", status_code=201, response_model=BookOut)
def create_book(body: BookIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.books.create(body.model_dump(exclude={"id"})))


@router.put("/{book_id}", status_code=204)
def update_book(book_id: int, body: BookIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.books.update(book_id, body.model_dump()))


@router.delete("/{book_id}", status_code=204)
def delete_book(book_id: int, catalog: Catalog = Depends(get_catalog)):
    """Hard-delete a book, its reviews and its author/category links."""
    return render(catalog.books.delete(book_id))
