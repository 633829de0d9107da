"""Two-round book pipeline: extract, aggregate themes, recommend.

Stage 1 asks the model for a BookListing from free-form text. Stage 2 is
local and deterministic: books are flattened, each theme's scores are
summed, and the top themes are selected. Stage 3 asks the model for
recommendations covering those themes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ellm.llm.protocols import Transport
from ellm.messages import Messages
from ellm.models.books import Book, BookListing, Recommendations
from ellm.schema import schema_for
from ellm.structured import DEFAULT_MAX_ATTEMPTS, retry_for_schema

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 5

EXTRACT_SYSTEM_PROMPT = (
    "Extract every book and book series the user mentions, together with "
    "how much they liked each one and its main themes. If the user omits "
    "an author, fill in the correct author. If the user refers to a series, "
    "list it as a series and expand it into every book it contains."
)

RECOMMEND_SYSTEM_PROMPT = (
    "The user gives a comma-separated list of themes they enjoy. Recommend "
    "well-known books that explore these themes."
)

LISTING_SCHEMA = schema_for(BookListing)
RECOMMENDATIONS_SCHEMA = schema_for(Recommendations)


@dataclass
class BookPipelineResult:
    """Everything produced by one run of the book pipeline."""

    listing: BookListing
    tally: dict[str, int]
    themes: list[str]
    recommendations: Recommendations = field(
        default_factory=lambda: Recommendations(recommendations=[])
    )


def extract_books(
    transport: Transport,
    text: str,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> BookListing:
    """Stage 1: extract books and series from free-form text."""
    return retry_for_schema(
        transport,
        Messages.from_prompt(text),
        EXTRACT_SYSTEM_PROMPT,
        LISTING_SCHEMA,
        max_attempts=max_attempts,
    )


def flatten_books(listing: BookListing) -> list[Book]:
    return listing.all_books()


def tally_themes(books: Iterable[Book]) -> dict[str, int]:
    """Sum book scores per theme.

    A theme appearing in several books accumulates every book's score.
    """
    tally: dict[str, int] = {}
    for book in books:
        for theme in book.themes:
            tally[theme] = tally.get(theme, 0) + book.score
    return tally


def rank_themes(tally: dict[str, int]) -> list[str]:
    """Themes by descending aggregate score, ties by name."""
    return [theme for theme, _ in sorted(tally.items(), key=lambda kv: (-kv[1], kv[0]))]


def top_themes(books: Iterable[Book], n: int = DEFAULT_TOP_N) -> list[str]:
    """Stage 2: the n best-scoring themes (fewer if fewer exist)."""
    return rank_themes(tally_themes(books))[:n]


def recommend(
    transport: Transport,
    themes: list[str],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Recommendations:
    """Stage 3: ask for recommendations covering the given themes."""
    return retry_for_schema(
        transport,
        Messages.from_prompt(", ".join(themes)),
        RECOMMEND_SYSTEM_PROMPT,
        RECOMMENDATIONS_SCHEMA,
        max_attempts=max_attempts,
    )


def run_book_pipeline(
    transport: Transport,
    text: str,
    *,
    top_n: int = DEFAULT_TOP_N,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> BookPipelineResult:
    """Run all three stages.

    If no themes are found the recommendation round is skipped and the
    result carries an empty recommendation list.
    """
    listing = extract_books(transport, text, max_attempts=max_attempts)
    books = flatten_books(listing)
    tally = tally_themes(books)
    themes = rank_themes(tally)[:top_n]
    logger.debug("Extracted %d book(s); top themes: %s", len(books), themes)

    result = BookPipelineResult(listing=listing, tally=tally, themes=themes)
    if not themes:
        logger.warning("No themes extracted; skipping recommendations")
        return result
    result.recommendations = recommend(transport, themes, max_attempts=max_attempts)
    return result
