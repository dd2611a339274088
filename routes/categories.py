"""Category endpoints under /api/categories."""

from typing import List

from fastapi import APIRouter, Depends

from api import get_catalog, render, render_list
from dal import Catalog
from schemas import BookOut, CategoryIn, CategoryOut

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=List[CategoryOut])
def list_categories(catalog: Catalog = Depends(get_catalog)):
    return render_list(catalog.categories.list())


@router.get("/books/{book_id}", response_model=List[CategoryOut])
def categories_of_book(book_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.categories_of_book(book_id))


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.categories.get(category_id))


@router.get("/{category_id}/books", response_model=List[BookOut])
def books_of_category(category_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.books_of_category(category_id))


@router.post("", status_code=201, response_model=CategoryOut)
def create_category(body: CategoryIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.categories.create(body.model_dump(exclude={"id"})))


@router.put("/{category_id}", status_code=204)
def update_category(category_id: int, body: CategoryIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.categories.update(category_id, body.model_dump()))


@router.delete("/{category_id}", status_code=204)
def delete_category(category_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.categories.delete(category_id))
