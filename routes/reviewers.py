"""Reviewer endpoints under /api/reviewers."""

from typing import List

from fastapi import APIRouter, Depends

from api import get_catalog, render, render_list
from dal import Catalog
from schemas import ReviewerIn, ReviewerOut, ReviewOut

router = APIRouter(prefix="/api/reviewers", tags=["reviewers"])


@router.get("", response_model=List[ReviewerOut])
def list_reviewers(catalog: Catalog = Depends(get_catalog)):
    return render_list(catalog.reviewers.list())


@router.get("/{reviewer_id}", response_model=ReviewerOut)
def get_reviewer(reviewer_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.reviewers.get(reviewer_id))


@router.get("/{reviewer_id}/reviews", response_model=List[ReviewOut])
def reviews_of_reviewer(reviewer_id: int, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.reviews_of_reviewer(reviewer_id))


@router.post("", status_code=201, response_model=ReviewerOut)
def create_reviewer(body: ReviewerIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.reviewers.create(body.model_dump(exclude={"id"})))


@router.put("/{reviewer_id}", status_code=204)
def update_reviewer(reviewer_id: int, body: ReviewerIn, catalog: Catalog = Depends(get_catalog)):
    return render(catalog.reviewers.update(reviewer_id, body.model_dump()))


@router.delete("/{reviewer_id}", status_code=204)
def delete_reviewer(reviewer_id: int, catalog: Catalog = Depends(get_catalog)):
    """Deletes the reviewer together with every review they wrote."""
    return render(catalog.reviewers.delete(reviewer_id))
