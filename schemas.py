"""
Pydantic request and response shapes for the HTTP layer.

Request bodies are deliberately loose (everything optional, no bounds): the
field constraints live on the models and are enforced by `rules.py`, so a
missing or too-long field comes back as the same Invalid outcome whichever
entry point triggered the write.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class CountryIn(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None


class CategoryIn(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None


class AuthorIn(BaseModel):
    id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    country_id: Optional[int] = None


class ReviewerIn(BaseModel):
    id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class BookIn(BaseModel):
    id: Optional[int] = None
    isbn: Optional[str] = None
    title: Optional[str] = None
    date_published: Optional[date] = None
    author_ids: List[int] = Field(default_factory=list)
    category_ids: List[int] = Field(default_factory=list)


class ReviewIn(BaseModel):
    id: Optional[int] = None
    headline: Optional[str] = None
    review_text: Optional[str] = None
    rating: Optional[int] = None
    book_id: Optional[int] = None
    reviewer_id: Optional[int] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class CountryOut(BaseModel):
    id: int
    name: str


class CategoryOut(BaseModel):
    id: int
    name: str


class AuthorOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    country_id: int


class ReviewerOut(BaseModel):
    id: int
    first_name: str
    last_name: str


class BookOut(BaseModel):
    id: int
    isbn: str
    title: str
    date_published: Optional[date] = None
    author_ids: List[int] = Field(default_factory=list)
    category_ids: List[int] = Field(default_factory=list)


class ReviewOut(BaseModel):
    id: int
    headline: str
    review_text: str
    rating: int
    book_id: int
    reviewer_id: int


class RatingOut(BaseModel):
    book_id: int
    # None until the book has at least one review.
    rating: Optional[float] = None
    reviews: int = 0


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Optional[List[ErrorDetail]] = None


class ErrorWrapper(BaseModel):
    error: ErrorResponse
