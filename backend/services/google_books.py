"""
Google Books client.

Keyword / subject search over the public volumes API. Sync methods
(requests) serve the library and search routes; the *_async methods (httpx)
serve the discovery feed so refills don't block the event loop.
"""

import logging
import random
from typing import Any, Dict, List, Optional

import httpx
import requests
from pydantic import ValidationError

from discovery.models.book import Book
from discovery.models.config import DEFAULT_SUBJECTS

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.googleapis.com/books/v1"
DEFAULT_TIMEOUT = 15.0


class GoogleBooksError(Exception):
    """Base error for the search API. str(e) is safe to show to users."""

    default_message = "Could not reach the book catalog."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class InvalidResponseError(GoogleBooksError):
    default_message = "Invalid response from server."


class HttpStatusError(GoogleBooksError):
    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"Server error (HTTP {status_code}).")


class RateLimitedError(HttpStatusError):
    def __init__(self):
        self.status_code = 429
        GoogleBooksError.__init__(self, "Too many requests. Please try again later.")


def _check_status(status_code: int) -> None:
    if status_code == 200:
        return
    if status_code == 429:
        raise RateLimitedError()
    raise HttpStatusError(status_code)


def _parse_volume(item: Dict[str, Any]) -> Optional[Book]:
    try:
        return Book.from_volume(item)
    except (KeyError, ValidationError) as e:
        logger.debug("[google_books] skipping malformed volume: %s", e)
        return None


def _parse_search(payload: Any) -> List[Book]:
    """Books from a volumes response; drops entries without a cover or description."""
    if not isinstance(payload, dict):
        raise InvalidResponseError()
    books = []
    for item in payload.get("items") or []:
        book = _parse_volume(item)
        if book is None or book.thumbnail_url is None or book.description is None:
            continue
        books.append(book)
    return books


class GoogleBooksClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        async_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._async_client = async_client or httpx.AsyncClient(timeout=timeout)
        self._rng = rng or random.Random()

    @property
    def volumes_url(self) -> str:
        return f"{self._base_url}/volumes"

    def _search_params(self, query: str, start_index: int, max_results: int, order_by: str) -> Dict[str, Any]:
        params = {
            "q": query,
            "startIndex": start_index,
            "maxResults": max_results,
            "orderBy": order_by,
            "printType": "books",
            "langRestrict": "en",
        }
        if self._api_key:
            params["key"] = self._api_key
        return params

    def _key_params(self) -> Dict[str, str]:
        return {"key": self._api_key} if self._api_key else {}

    # Search

    def search_books(
        self,
        query: str,
        start_index: int = 0,
        max_results: int = 20,
        order_by: str = "relevance",
    ) -> List[Book]:
        """Search by title, author, subject or free text."""
        payload = self._get(self.volumes_url, self._search_params(query, start_index, max_results, order_by))
        return _parse_search(payload)

    async def search_books_async(
        self,
        query: str,
        start_index: int = 0,
        max_results: int = 20,
        order_by: str = "relevance",
    ) -> List[Book]:
        """Async path: same request and filtering as search_books."""
        payload = await self._get_async(
            self.volumes_url, self._search_params(query, start_index, max_results, order_by)
        )
        return _parse_search(payload)

    async def fetch_trending_books_async(self, start_index: int = 0, max_results: int = 10) -> List[Book]:
        """Popular books from a random subject."""
        subject = self._rng.choice(DEFAULT_SUBJECTS)
        return await self.search_books_async(
            f"subject:{subject}", start_index=start_index, max_results=max_results
        )

    # Details

    def fetch_book_details(self, book_id: str) -> Book:
        payload = self._get(f"{self.volumes_url}/{book_id}", self._key_params())
        return self._parse_details(payload)

    async def fetch_book_details_async(self, book_id: str) -> Book:
        payload = await self._get_async(f"{self.volumes_url}/{book_id}", self._key_params())
        return self._parse_details(payload)

    def fetch_similar_books(self, book: Book, max_results: int = 6) -> List[Book]:
        """Books sharing the first category, else the first author. Excludes the book itself."""
        if book.categories:
            query = f"subject:{book.categories[0]}"
        else:
            query = f"inauthor:{book.authors[0] if book.authors else ''}"
        results = self.search_books(query, max_results=max_results + 1)
        return [b for b in results if b.id != book.id][:max_results]

    # Lifecycle

    def close(self) -> None:
        self._session.close()

    async def aclose(self) -> None:
        await self._async_client.aclose()

    # HTTP

    def _get(self, url: str, params: Dict[str, Any]) -> Any:
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            logger.warning("[google_books] GET %s failed: %s", url, e)
            raise GoogleBooksError() from e
        _check_status(response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError() from e

    async def _get_async(self, url: str, params: Dict[str, Any]) -> Any:
        try:
            response = await self._async_client.get(url, params=params, timeout=self._timeout)
        except httpx.HTTPError as e:
            logger.warning("[google_books] GET %s failed: %s: %s", url, type(e).__name__, e)
            raise GoogleBooksError() from e
        _check_status(response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError() from e

    @staticmethod
    def _parse_details(payload: Any) -> Book:
        if not isinstance(payload, dict):
            raise InvalidResponseError()
        book = _parse_volume(payload)
        if book is None:
            raise InvalidResponseError()
        return book
