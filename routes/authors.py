"""Author endpoints under /api/authors."""

from typing import List

from fastapi import APIRouter, Depends

from api import get_catalog, render, render_list
from dal import Catalog
from schemas import AuthorIn, AuthorOut, BookOut

router = APIRouter(prefix="/api/authors", tags=["authors"])


@router.get("", response_model=List[AuthorOut])
def list_authors(catalog: Catalog = Depends(get_catalog)):
    return render_list(catalog.authors.list())


@router.get("/books/{book_id}", response_model=List[AuthorOut])
def authors_of_book(book_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.authors_of_book(book_id))


@router.get("/{author_id}", response_model=AuthorOut)
def get_author(author_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.authors.get(author_id))


@router.get("/{author_id}/books", response_model=List[BookOut])
def books_of_author(author_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.books_of_author(author_id))


@router.post("", status_code=201, response_model=AuthorOut)
def create_author(body: AuthorIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.authors.create(body.model_dump(exclude={"id"})))


@router.put("/{author_id}", status_code=204)
def update_author(author_id: int, body: AuthorIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.authors.update(author_id, body.model_dump()))


@router.delete("/{author_id}", status_code=204)
def delete_author(author_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.authors.delete(author_id))
