"""Data models for the discovery feed."""

from .book import Book, ensure_books
from .config import DEFAULT_CONFIG, DEFAULT_SUBJECTS, FeedConfig, resolve_config
from .library import (
    BookStatus,
    Review,
    UserBook,
    UserStats,
    ensure_reviews,
    ensure_user_books,
)
from .swipe import SwipeAction, SwipeType

__all__ = [
    "Book",
    "BookStatus",
    "DEFAULT_CONFIG",
    "DEFAULT_SUBJECTS",
    "FeedConfig",
    "Review",
    "SwipeAction",
    "SwipeType",
    "UserBook",
    "UserStats",
    "ensure_books",
    "ensure_reviews",
    "ensure_user_books",
    "resolve_config",
]
