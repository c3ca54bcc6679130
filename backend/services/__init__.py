"""Backing logic: API clients and stores."""

from .auth import AuthError, AuthService, AuthSession
from .data_store import (
    DataStore,
    DataStoreError,
    InMemoryDataStore,
    NoDataError,
    SupabaseDataStore,
    UnauthorizedError,
)
from .google_books import (
    GoogleBooksClient,
    GoogleBooksError,
    HttpStatusError,
    InvalidResponseError,
    RateLimitedError,
)

__all__ = [
    "AuthError",
    "AuthService",
    "AuthSession",
    "DataStore",
    "DataStoreError",
    "GoogleBooksClient",
    "GoogleBooksError",
    "HttpStatusError",
    "InMemoryDataStore",
    "InvalidResponseError",
    "NoDataError",
    "RateLimitedError",
    "SupabaseDataStore",
    "UnauthorizedError",
]
