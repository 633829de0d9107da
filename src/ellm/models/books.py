"""Book, series and recommendation models for the book pipeline.

Scores are bounded: a Book scores in [-2, 2], a Series in [-1, 1].
Out-of-range values fail validation rather than being clamped, which
sends the error back to the model for correction.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Book(BaseModel):
    """A single book with the reader's sentiment and its themes."""

    title: str
    authors: list[str] = Field(description="Full author names; resolve them if the user omitted them")
    score: int = Field(
        ge=-2,
        le=2,
        description="Reader sentiment: -2 hated, -1 disliked, 0 neutral, 1 liked, 2 loved",
    )
    themes: list[str] = Field(description="Short lowercase theme names, e.g. 'war', 'coming of age'")


class Series(BaseModel):
    """A book series, expanded into its individual books."""

    title: str
    authors: list[str]
    score: int | None = Field(
        default=None,
        ge=-1,
        le=1,
        description="Overall sentiment toward the series, if stated: -1, 0 or 1",
    )
    books: list[Book] = Field(description="Every book in the series, in reading order")


class BookListing(BaseModel):
    """Books and series mentioned in free-form text."""

    books: list[Book] = Field(default_factory=list)
    series: list[Series] = Field(default_factory=list)

    def all_books(self) -> list[Book]:
        """Directly listed books followed by books nested under series."""
        flat = list(self.books)
        for series in self.series:
            flat.extend(series.books)
        return flat


class Recommendation(BaseModel):
    """One recommended book."""

    title: str
    authors: list[str]
    themes: list[str] = Field(description="Which of the requested themes this book covers")
    reason: str = Field(description="One sentence on why it fits")


class Recommendations(BaseModel):
    """Books recommended for a set of themes."""

    recommendations: list[Recommendation]
