"""Review endpoints under /api/reviews."""

from typing import List

from fastapi import APIRouter, Depends

from api import get_catalog, render, render_list
from dal import Catalog
from schemas import BookOut, ReviewerOut, ReviewIn, ReviewOut

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.get("", response_model=List[ReviewOut])
def list_reviews(catalog: Catalog = Depends(get_catalog)):
    return render_list(catalog.reviews.list())


@router.get("/books/{book_id}", response_model=List[ReviewOut])
def reviews_of_book(book_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.reviews_of_book(book_id))


@router.get("/{review_id}", response_model=ReviewOut)
def get_review(review_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.reviews.get(review_id))


@router.get("/{review_id}/book", response_model=BookOut)
def book_of_review(review_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.book_of_review(review_id))


@router.get("/{review_id}/reviewer", response_model=ReviewerOut)
def reviewer_of_review(review_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.reviewer_of_review(review_id))


@router.post("", status_code=201, response_model=ReviewOut)
def create_review(body: ReviewIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.reviews.create(body.model_dump(exclude={"id"})))


@router.put("/{review_id}", status_code=204)
def update_review(review_id: int, body: ReviewIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.reviews.update(review_id, body.model_dump()))


@router.delete("/{review_id}", status_code=204)
def delete_review(review_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.reviews.delete(review_id))
