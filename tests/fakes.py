"""Test doubles shared by the test modules."""

import asyncio
from typing import Dict, List, Optional, Sequence, Union

from backend.services import HttpStatusError
from discovery import Book
from discovery.models.library import BookStatus
from discovery.models.swipe import SwipeType


def make_book(book_id: str, **overrides) -> Book:
    fields = {
        "id": book_id,
        "title": f"Book {book_id}",
        "authors": ["Test Author"],
        "description": f"Description of {book_id}.",
        "categories": ["Fiction"],
        "thumbnail_url": f"https://covers.example/{book_id}.jpg",
    }
    fields.update(overrides)
    return Book(**fields)


def make_books(*ids: str) -> List[Book]:
    return [make_book(i) for i in ids]


class ScriptedSource:
    """
    BatchSource that replays a script: each fetch_batch returns the next
    list of books, or raises it when the entry is an exception. Returns []
    once the script runs out.
    """

    def __init__(self, batches: Sequence[Union[List[Book], Exception]] = ()):
        self._batches = list(batches)
        self.calls = 0

    async def fetch_batch(self) -> List[Book]:
        self.calls += 1
        if not self._batches:
            return []
        batch = self._batches.pop(0)
        if isinstance(batch, Exception):
            raise batch
        return list(batch)


class BlockingSource:
    """BatchSource whose fetches wait until release() is called."""

    def __init__(self, books: Optional[List[Book]] = None):
        self._books = books or []
        self._released: Optional[asyncio.Event] = None
        self.started = 0
        self.active = 0
        self.max_active = 0

    def _event(self) -> asyncio.Event:
        if self._released is None:
            self._released = asyncio.Event()
        return self._released

    async def fetch_batch(self) -> List[Book]:
        self.started += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await self._event().wait()
        finally:
            self.active -= 1
        return list(self._books)

    def release(self) -> None:
        self._event().set()


class SlowSource:
    def __init__(self, delay: float):
        self._delay = delay

    async def fetch_batch(self) -> List[Book]:
        await asyncio.sleep(self._delay)
        return []


class RecordingSearch:
    """BookSearch that records queries and serves pages from a dict keyed by (query, start_index)."""

    def __init__(self, pages: Optional[Dict] = None, default: Optional[List[Book]] = None, error: Exception = None):
        self._pages = pages or {}
        self._default = default or []
        self._error = error
        self.calls: List[Dict] = []

    async def search_books_async(self, query, start_index=0, max_results=20, order_by="relevance"):
        self.calls.append({
            "query": query,
            "start_index": start_index,
            "max_results": max_results,
            "order_by": order_by,
        })
        if self._error is not None:
            raise self._error
        return list(self._pages.get((query, start_index), self._default))


class FailingHistory:
    async def fetch_swiped_book_ids_async(self, user_id):
        raise RuntimeError("history unavailable")


class FailingStore:
    """InteractionStore whose writes always fail."""

    def __init__(self):
        self.attempts = 0

    async def record_swipe_async(self, user_id: str, google_books_id: str, action: SwipeType) -> None:
        self.attempts += 1
        raise RuntimeError("store down")

    async def add_user_book_async(self, user_id, google_books_id, status=BookStatus.WANT_TO_READ):
        self.attempts += 1
        raise RuntimeError("store down")


def volume(volume_id: str, title: str = None, thumbnail: bool = True, description: bool = True, **info) -> Dict:
    """A Google Books volumes item."""
    volume_info = {
        "title": title or f"Volume {volume_id}",
        "authors": ["Volume Author"],
        "categories": ["Mystery"],
        "averageRating": 4.0,
        "pageCount": 300,
        "publishedDate": "2020-01-01",
        "infoLink": f"http://books.google.com/books?id={volume_id}",
    }
    if description:
        volume_info["description"] = f"About {volume_id}."
    if thumbnail:
        volume_info["imageLinks"] = {
            "smallThumbnail": f"http://books.google.com/{volume_id}&zoom=5",
            "thumbnail": f"http://books.google.com/{volume_id}&zoom=1",
        }
    volume_info.update(info)
    return {"id": volume_id, "volumeInfo": volume_info}


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload=None, content: bytes = None):
        self.status_code = status_code
        self._payload = payload
        if content is None:
            content = b"" if payload is None else b"json"
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeBooksClient:
    """
    Catalog stand-in for the API tests. Every search page is ten unique
    books derived from the query and offset; `fail` makes every call raise.
    """

    def __init__(self, fail: Exception = None):
        self.fail = fail
        self.queries: List[str] = []
        self.closed = False

    def _page(self, query: str, start_index: int, max_results: int) -> List[Book]:
        self.queries.append(query)
        if self.fail is not None:
            raise self.fail
        slug = query.replace("subject:", "").replace(" ", "-")
        return [make_book(f"{slug}-{start_index + i}") for i in range(max_results)]

    async def search_books_async(self, query, start_index=0, max_results=20, order_by="relevance"):
        return self._page(query, start_index, max_results)

    def search_books(self, query, start_index=0, max_results=20, order_by="relevance"):
        return self._page(query, start_index, max_results)

    def fetch_book_details(self, book_id: str) -> Book:
        if self.fail is not None:
            raise self.fail
        if book_id.startswith("missing"):
            raise HttpStatusError(404)
        return make_book(book_id)

    def fetch_similar_books(self, book: Book, max_results: int = 6) -> List[Book]:
        return [b for b in self._page(f"subject:{book.genre_display}", 0, max_results + 1) if b.id != book.id][:max_results]

    def close(self) -> None:
        self.closed = True

    async def aclose(self) -> None:
        self.closed = True


class GatedBooksClient(FakeBooksClient):
    """
    FakeBooksClient whose async searches after the first `open_calls` wait
    for release(). Tracks how many searches run at once.
    """

    def __init__(self, open_calls: int = 1, page_size: int = 1):
        super().__init__()
        self._open_calls = open_calls
        self._page_size = page_size
        self._gate: Optional[asyncio.Event] = None
        self.started = 0
        self.active = 0
        self.max_active = 0

    def _event(self) -> asyncio.Event:
        if self._gate is None:
            self._gate = asyncio.Event()
        return self._gate

    def release(self) -> None:
        self._event().set()

    async def search_books_async(self, query, start_index=0, max_results=20, order_by="relevance"):
        self.started += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.started > self._open_calls:
                await self._event().wait()
        finally:
            self.active -= 1
        return self._page(query, start_index, self._page_size)
