"""Library, review and profile Pydantic models."""

from typing import List, Optional

from pydantic import BaseModel, Field

from discovery.models.library import BookStatus, UserStats

from .common import BookCard


class AddUserBookRequest(BaseModel):
    google_books_id: str = Field(min_length=1)
    status: BookStatus = BookStatus.WANT_TO_READ


class UpdateStatusRequest(BaseModel):
    status: BookStatus


class UserBookResponse(BaseModel):
    id: str
    google_books_id: str
    status: BookStatus
    status_display: str
    added_at: Optional[str] = None
    updated_at: Optional[str] = None
    book: Optional[BookCard] = None


class LibraryResponse(BaseModel):
    want_to_read: List[UserBookResponse] = []
    reading: List[UserBookResponse] = []
    read: List[UserBookResponse] = []


class ReviewRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    review_text: Optional[str] = None


class ReviewResponse(BaseModel):
    id: str
    google_books_id: str
    rating: int
    review_text: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ProfileResponse(BaseModel):
    user_id: str
    display_name: str
    stats: UserStats
