"""
Library models: books saved to a user's shelf, reviews and profile stats.

Rows come from the hosted data store; field names match its columns.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .book import Book


class BookStatus(str, Enum):
    WANT_TO_READ = "want_to_read"
    READING = "reading"
    READ = "read"

    @property
    def display_name(self) -> str:
        return _STATUS_DISPLAY[self]


_STATUS_DISPLAY = {
    BookStatus.WANT_TO_READ: "Want to Read",
    BookStatus.READING: "Reading",
    BookStatus.READ: "Read",
}


class UserBook(BaseModel):
    """
    A book saved to a user's library.

    book is transient: filled from the search API when the library is
    listed, never written back to the store.
    """

    id: str
    user_id: str
    google_books_id: str
    status: BookStatus = BookStatus.WANT_TO_READ
    added_at: Optional[str] = None
    updated_at: Optional[str] = None
    book: Optional[Book] = Field(default=None, exclude=True)


class Review(BaseModel):
    """A user's review of a book they've read."""

    id: str
    user_id: str
    google_books_id: str
    rating: int
    review_text: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return 1 <= self.rating <= 5


class UserStats(BaseModel):
    books_read: int = 0
    reviews_written: int = 0
    total_books: int = 0

    @classmethod
    def from_rows(cls, books: List[UserBook], reviews: List[Review]) -> "UserStats":
        return cls(
            books_read=sum(1 for b in books if b.status == BookStatus.READ),
            reviews_written=len(reviews),
            total_books=len(books),
        )


def ensure_user_books(rows: List[Union[Dict[str, Any], "UserBook"]]) -> List["UserBook"]:
    """Convert store rows to UserBook models."""
    return [
        UserBook.model_validate(r) if isinstance(r, dict) else r
        for r in rows
    ]


def ensure_reviews(rows: List[Union[Dict[str, Any], "Review"]]) -> List["Review"]:
    """Convert store rows to Review models."""
    return [
        Review.model_validate(r) if isinstance(r, dict) else r
        for r in rows
    ]
