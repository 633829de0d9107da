"""Typed result models decoded from structured responses."""

from ellm.models.answers import BoolAnswer
from ellm.models.books import (
    Book,
    BookListing,
    Recommendation,
    Recommendations,
    Series,
)

__all__ = [
    "BoolAnswer",
    "Book",
    "BookListing",
    "Recommendation",
    "Recommendations",
    "Series",
]
