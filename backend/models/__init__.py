"""Pydantic request/response models for the API."""

from .auth import AuthResponse, TokenRequest
from .common import BookCard, PurchaseLinks
from .library import (
    AddUserBookRequest,
    LibraryResponse,
    ProfileResponse,
    ReviewRequest,
    ReviewResponse,
    UpdateStatusRequest,
    UserBookResponse,
)
from .sessions import CreateSessionRequest, SessionResponse

__all__ = [
    "AddUserBookRequest",
    "AuthResponse",
    "BookCard",
    "CreateSessionRequest",
    "LibraryResponse",
    "ProfileResponse",
    "PurchaseLinks",
    "ReviewRequest",
    "ReviewResponse",
    "SessionResponse",
    "TokenRequest",
    "UpdateStatusRequest",
    "UserBookResponse",
]
