"""
Data Store abstraction.

Per-user collections behind the app: library entries (user_books), reviews
and swipe history. Implementations: in-memory (development mode, tests) and
Supabase PostgREST (production). Swap via config: the in-memory store is
used when SUPABASE_URL / SUPABASE_ANON_KEY are not set in a debug build.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Set

import httpx
import requests

from discovery.models.library import (
    BookStatus,
    Review,
    UserBook,
    UserStats,
    ensure_reviews,
    ensure_user_books,
)
from discovery.models.swipe import SwipeAction, SwipeType

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class DataStoreError(Exception):
    """Base error for the data store. str(e) is safe to show to users."""

    default_message = "Could not reach the server."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class NoDataError(DataStoreError):
    default_message = "No data returned from server."


class UnauthorizedError(DataStoreError):
    default_message = "You must be signed in to perform this action."


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_rating(rating: int) -> None:
    if not 1 <= rating <= 5:
        raise ValueError(f"Rating must be between 1 and 5, got {rating}")


class DataStore(Protocol):
    """Protocol for per-user data. Implement for in-memory or Supabase."""

    def for_token(self, access_token: Optional[str]) -> "DataStore":
        """Return a store that sends this bearer token. In-memory returns itself."""
        ...

    def fetch_user_books(self, user_id: str, status: Optional[BookStatus] = None) -> List[UserBook]:
        """Library entries, newest first, optionally filtered by status."""
        ...

    def add_user_book(
        self, user_id: str, google_books_id: str, status: BookStatus = BookStatus.WANT_TO_READ
    ) -> UserBook:
        ...

    async def add_user_book_async(
        self, user_id: str, google_books_id: str, status: BookStatus = BookStatus.WANT_TO_READ
    ) -> UserBook:
        ...

    def update_book_status(self, user_book_id: str, status: BookStatus) -> None:
        ...

    def delete_user_book(self, user_book_id: str) -> None:
        ...

    def fetch_review(self, user_id: str, google_books_id: str) -> Optional[Review]:
        ...

    def fetch_user_reviews(self, user_id: str) -> List[Review]:
        """Reviews, newest first."""
        ...

    def upsert_review(
        self, user_id: str, google_books_id: str, rating: int, review_text: Optional[str] = None
    ) -> Review:
        """Create or replace the user's review of a book."""
        ...

    def delete_review(self, review_id: str) -> None:
        ...

    async def record_swipe_async(self, user_id: str, google_books_id: str, action: SwipeType) -> None:
        ...

    async def fetch_swiped_book_ids_async(self, user_id: str) -> Set[str]:
        ...

    def fetch_user_stats(self, user_id: str) -> UserStats:
        ...


class InMemoryDataStore:
    """
    Data store kept in process memory (no persistence).
    Used for development mode and tests.
    """

    def __init__(self):
        self._user_books: Dict[str, Dict] = {}
        self._reviews: Dict[str, Dict] = {}
        self._swipes: List[Dict] = []

    def for_token(self, access_token: Optional[str]) -> "InMemoryDataStore":
        return self

    @property
    def swipes(self) -> List[Dict]:
        return list(self._swipes)

    def fetch_user_books(self, user_id: str, status: Optional[BookStatus] = None) -> List[UserBook]:
        rows = [r for r in self._user_books.values() if r["user_id"] == user_id]
        if status is not None:
            rows = [r for r in rows if r["status"] == status.value]
        rows.sort(key=lambda r: r["added_at"], reverse=True)
        return ensure_user_books(rows)

    def add_user_book(
        self, user_id: str, google_books_id: str, status: BookStatus = BookStatus.WANT_TO_READ
    ) -> UserBook:
        ts = _now()
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "google_books_id": google_books_id,
            "status": status.value,
            "added_at": ts,
            "updated_at": ts,
        }
        self._user_books[row["id"]] = row
        return UserBook.model_validate(row)

    async def add_user_book_async(
        self, user_id: str, google_books_id: str, status: BookStatus = BookStatus.WANT_TO_READ
    ) -> UserBook:
        return self.add_user_book(user_id, google_books_id, status)

    def update_book_status(self, user_book_id: str, status: BookStatus) -> None:
        row = self._user_books.get(user_book_id)
        if row is None:
            raise NoDataError()
        row["status"] = status.value
        row["updated_at"] = _now()

    def delete_user_book(self, user_book_id: str) -> None:
        self._user_books.pop(user_book_id, None)

    def fetch_review(self, user_id: str, google_books_id: str) -> Optional[Review]:
        for row in self._reviews.values():
            if row["user_id"] == user_id and row["google_books_id"] == google_books_id:
                return Review.model_validate(row)
        return None

    def fetch_user_reviews(self, user_id: str) -> List[Review]:
        rows = [r for r in self._reviews.values() if r["user_id"] == user_id]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return ensure_reviews(rows)

    def upsert_review(
        self, user_id: str, google_books_id: str, rating: int, review_text: Optional[str] = None
    ) -> Review:
        _check_rating(rating)
        ts = _now()
        existing = self.fetch_review(user_id, google_books_id)
        if existing is not None:
            row = self._reviews[existing.id]
            row.update(rating=rating, updated_at=ts)
            if review_text is not None:
                row["review_text"] = review_text
        else:
            row = {
                "id": str(uuid.uuid4()),
                "user_id": user_id,
                "google_books_id": google_books_id,
                "rating": rating,
                "review_text": review_text,
                "created_at": ts,
                "updated_at": ts,
            }
            self._reviews[row["id"]] = row
        return Review.model_validate(row)

    def delete_review(self, review_id: str) -> None:
        self._reviews.pop(review_id, None)

    async def record_swipe_async(self, user_id: str, google_books_id: str, action: SwipeType) -> None:
        swipe = SwipeAction(
            id=str(uuid.uuid4()),
            user_id=user_id,
            google_books_id=google_books_id,
            action=action,
            swiped_at=_now(),
        )
        self._swipes.append(swipe.model_dump(mode="json"))

    async def fetch_swiped_book_ids_async(self, user_id: str) -> Set[str]:
        return {s["google_books_id"] for s in self._swipes if s["user_id"] == user_id}

    def fetch_user_stats(self, user_id: str) -> UserStats:
        return UserStats.from_rows(self.fetch_user_books(user_id), self.fetch_user_reviews(user_id))


class SupabaseDataStore:
    """
    Data store backed by Supabase PostgREST at <url>/rest/v1/<table>.

    Every request carries the project's anon key; requests made on behalf of
    a user also carry that user's bearer token (see for_token). Tables:
    user_books, reviews, swipe_history.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        access_token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        async_client: Optional[httpx.AsyncClient] = None,
    ):
        self._url = url.rstrip("/")
        self._anon_key = anon_key
        self._access_token = access_token
        self._timeout = timeout
        self._session = session or requests.Session()
        self._async_client = async_client or httpx.AsyncClient(timeout=timeout)

    def for_token(self, access_token: Optional[str]) -> "SupabaseDataStore":
        """Same connection pools, different bearer token."""
        return SupabaseDataStore(
            self._url,
            self._anon_key,
            access_token=access_token,
            timeout=self._timeout,
            session=self._session,
            async_client=self._async_client,
        )

    def _rest_url(self, table: str) -> str:
        return f"{self._url}/rest/v1/{table}"

    def _headers(self, prefer: str = "return=representation") -> Dict[str, str]:
        headers = {
            "apikey": self._anon_key,
            "Content-Type": "application/json",
            "Prefer": prefer,
        }
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    @staticmethod
    def _handle(status_code: int, content: bytes, json_loader) -> Any:
        if status_code in (401, 403):
            raise UnauthorizedError()
        if status_code >= 400:
            raise DataStoreError(f"Server error (HTTP {status_code}).")
        if not content:
            return None
        try:
            return json_loader()
        except ValueError as e:
            raise DataStoreError("Invalid response from server.") from e

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: str = "return=representation",
    ) -> Any:
        try:
            response = self._session.request(
                method,
                self._rest_url(table),
                params=params,
                json=json,
                headers=self._headers(prefer),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("[data_store] %s %s failed: %s", method, table, e)
            raise DataStoreError() from e
        return self._handle(response.status_code, response.content, response.json)

    async def _request_async(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: str = "return=representation",
    ) -> Any:
        try:
            response = await self._async_client.request(
                method,
                self._rest_url(table),
                params=params,
                json=json,
                headers=self._headers(prefer),
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("[data_store] %s %s failed: %s: %s", method, table, type(e).__name__, e)
            raise DataStoreError() from e
        return self._handle(response.status_code, response.content, response.json)

    # User books

    def fetch_user_books(self, user_id: str, status: Optional[BookStatus] = None) -> List[UserBook]:
        params = {"user_id": f"eq.{user_id}", "order": "added_at.desc"}
        if status is not None:
            params["status"] = f"eq.{status.value}"
        return ensure_user_books(self._request("GET", "user_books", params=params) or [])

    @staticmethod
    def _user_book_body(user_id: str, google_books_id: str, status: BookStatus) -> Dict[str, str]:
        return {"user_id": user_id, "google_books_id": google_books_id, "status": status.value}

    @staticmethod
    def _first(rows: Any, model):
        if not rows:
            raise NoDataError()
        return model.model_validate(rows[0])

    def add_user_book(
        self, user_id: str, google_books_id: str, status: BookStatus = BookStatus.WANT_TO_READ
    ) -> UserBook:
        rows = self._request("POST", "user_books", json=self._user_book_body(user_id, google_books_id, status))
        return self._first(rows, UserBook)

    async def add_user_book_async(
        self, user_id: str, google_books_id: str, status: BookStatus = BookStatus.WANT_TO_READ
    ) -> UserBook:
        rows = await self._request_async(
            "POST", "user_books", json=self._user_book_body(user_id, google_books_id, status)
        )
        return self._first(rows, UserBook)

    def update_book_status(self, user_book_id: str, status: BookStatus) -> None:
        """Raises NoDataError when no row has this id."""
        rows = self._request(
            "PATCH",
            "user_books",
            params={"id": f"eq.{user_book_id}"},
            json={"status": status.value, "updated_at": _now()},
        )
        self._first(rows, UserBook)

    def delete_user_book(self, user_book_id: str) -> None:
        self._request("DELETE", "user_books", params={"id": f"eq.{user_book_id}"})

    # Reviews

    def fetch_review(self, user_id: str, google_books_id: str) -> Optional[Review]:
        rows = self._request(
            "GET",
            "reviews",
            params={"user_id": f"eq.{user_id}", "google_books_id": f"eq.{google_books_id}"},
        )
        return Review.model_validate(rows[0]) if rows else None

    def fetch_user_reviews(self, user_id: str) -> List[Review]:
        rows = self._request(
            "GET", "reviews", params={"user_id": f"eq.{user_id}", "order": "created_at.desc"}
        )
        return ensure_reviews(rows or [])

    def upsert_review(
        self, user_id: str, google_books_id: str, rating: int, review_text: Optional[str] = None
    ) -> Review:
        _check_rating(rating)
        body = {"user_id": user_id, "google_books_id": google_books_id, "rating": rating}
        if review_text is not None:
            body["review_text"] = review_text
        rows = self._request(
            "POST",
            "reviews",
            params={"on_conflict": "user_id,google_books_id"},
            json=body,
            prefer="resolution=merge-duplicates,return=representation",
        )
        return self._first(rows, Review)

    def delete_review(self, review_id: str) -> None:
        self._request("DELETE", "reviews", params={"id": f"eq.{review_id}"})

    # Swipe history

    async def record_swipe_async(self, user_id: str, google_books_id: str, action: SwipeType) -> None:
        await self._request_async(
            "POST",
            "swipe_history",
            json={"user_id": user_id, "google_books_id": google_books_id, "action": action.value},
            prefer="return=minimal",
        )

    async def fetch_swiped_book_ids_async(self, user_id: str) -> Set[str]:
        rows = await self._request_async(
            "GET", "swipe_history", params={"user_id": f"eq.{user_id}", "select": "google_books_id"}
        )
        return {r["google_books_id"] for r in rows or [] if r.get("google_books_id")}

    # Stats

    def fetch_user_stats(self, user_id: str) -> UserStats:
        return UserStats.from_rows(self.fetch_user_books(user_id), self.fetch_user_reviews(user_id))

    # Lifecycle

    def close(self) -> None:
        self._session.close()

    async def aclose(self) -> None:
        await self._async_client.aclose()
