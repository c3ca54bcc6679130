"""
Prefetch queue: buffered lookahead of upcoming feed books.

The head is popped synchronously on the interactive path. When fewer than
`threshold` books remain, a refill is started as a background task on the
running event loop. Only one refill runs at a time: scheduling a new one
cancels the one in flight.

A refill drops books whose ids are in the seen set (or already queued) and
appends the rest. A refill that fails leaves the queue exactly as it was.
"""

import asyncio
import logging
from collections import deque
from typing import Deque, List, Optional, Tuple

from .models.book import Book
from .seen import SeenSet
from .source import BatchSource

logger = logging.getLogger(__name__)

DEFAULT_PREFETCH_THRESHOLD = 3


class PrefetchQueue:
    """FIFO of upcoming books, refilled from a BatchSource."""

    def __init__(
        self,
        source: BatchSource,
        seen: SeenSet,
        threshold: int = DEFAULT_PREFETCH_THRESHOLD,
        timeout: Optional[float] = None,
    ):
        self._source = source
        self._seen = seen
        self._threshold = threshold
        self._timeout = timeout
        self._items: Deque[Book] = deque()
        self._refill_task: Optional[asyncio.Task] = None
        self.last_error: Optional[Exception] = None

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> Tuple[Book, ...]:
        return tuple(self._items)

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def refilling(self) -> bool:
        return self._refill_task is not None and not self._refill_task.done()

    def peek(self) -> Optional[Book]:
        return self._items[0] if self._items else None

    def next_item(self) -> Optional[Book]:
        """
        Pop the head (None when empty).

        Must be called from a running event loop when the pop can leave the
        queue below the threshold, since that schedules a refill task.
        """
        book = self._items.popleft() if self._items else None
        if len(self._items) < self._threshold:
            self.schedule_refill()
        return book

    def push_front(self, book: Book) -> None:
        """Put a book back at the head (used when stepping back in the feed)."""
        self._items.appendleft(book)

    def seed(self, books: List[Book], filter_seen: bool = True) -> int:
        """
        Append an initial batch. Duplicates of queued books are always dropped;
        seen books only when filter_seen is set.
        """
        return self._append_unseen(books, filter_seen=filter_seen)

    def schedule_refill(self) -> asyncio.Task:
        """Start a background refill, cancelling any refill already in flight."""
        if self.refilling:
            logger.debug("[prefetch] cancelling in-flight refill")
            self._refill_task.cancel()
        self._refill_task = asyncio.get_running_loop().create_task(self.refill())
        return self._refill_task

    async def refill(self) -> int:
        """Fetch one batch and append the unseen books. Returns how many were added."""
        try:
            if self._timeout is not None:
                books = await asyncio.wait_for(self._source.fetch_batch(), self._timeout)
            else:
                books = await self._source.fetch_batch()
        except asyncio.CancelledError:
            logger.debug("[prefetch] refill cancelled")
            raise
        except Exception as e:
            self.last_error = e
            logger.warning(
                "[prefetch] refill failed, keeping %d queued: %s: %s",
                len(self._items), type(e).__name__, e,
            )
            return 0
        self.last_error = None
        added = self._append_unseen(books)
        logger.debug(
            "[prefetch] refill fetched=%d added=%d queued=%d", len(books), added, len(self._items)
        )
        return added

    async def wait_for_refill(self) -> Optional[int]:
        """
        Wait for the in-flight refill, if any, following any refill that
        replaced it meanwhile. None when there was none or it was cancelled.
        """
        while True:
            task = self._refill_task
            if task is None:
                return None
            await asyncio.wait({task})
            if self._refill_task is not task:
                continue
            if task.cancelled():
                return None
            return task.result()

    def close(self) -> None:
        if self.refilling:
            self._refill_task.cancel()

    def _append_unseen(self, books: List[Book], filter_seen: bool = True) -> int:
        queued = {b.id for b in self._items}
        added = 0
        for book in books:
            if book.id in queued or (filter_seen and book.id in self._seen):
                continue
            self._items.append(book)
            queued.add(book.id)
            added += 1
        return added
