"""Task operations built on the structured-response engine."""

from ellm.operations.ask import ask_bool
from ellm.operations.books import (
    BookPipelineResult,
    extract_books,
    flatten_books,
    rank_themes,
    recommend,
    run_book_pipeline,
    tally_themes,
    top_themes,
)

__all__ = [
    "ask_bool",
    "BookPipelineResult",
    "extract_books",
    "flatten_books",
    "rank_themes",
    "recommend",
    "run_book_pipeline",
    "tally_themes",
    "top_themes",
]
