"""
Interaction recorder: persists feed actions without blocking the feed.

Every call schedules a background task and returns immediately. Failures
are logged and dropped: a lost swipe only means the book may show up again
in a later session.
"""

import asyncio
import logging
from typing import Any, Awaitable, Optional, Protocol, Set

from .models.library import BookStatus
from .models.swipe import SwipeType

logger = logging.getLogger(__name__)


class InteractionStore(Protocol):
    """Remote writes the recorder needs."""

    async def record_swipe_async(self, user_id: str, google_books_id: str, action: SwipeType) -> None:
        ...

    async def add_user_book_async(
        self, user_id: str, google_books_id: str, status: BookStatus = BookStatus.WANT_TO_READ
    ) -> Any:
        ...


class InteractionRecorder:
    """Fire-and-forget writer for swipes and library additions."""

    def __init__(self, store: Optional[InteractionStore]):
        self._store = store
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def record_swipe(self, user_id: Optional[str], book_id: str, action: SwipeType) -> Optional[asyncio.Task]:
        if self._store is None or not user_id:
            return None
        return self._spawn(
            self._store.record_swipe_async(user_id, book_id, action),
            f"record_swipe {action.value} book={book_id}",
        )

    def save_to_library(
        self,
        user_id: Optional[str],
        book_id: str,
        status: BookStatus = BookStatus.WANT_TO_READ,
    ) -> Optional[asyncio.Task]:
        if self._store is None or not user_id:
            return None
        return self._spawn(
            self._store.add_user_book_async(user_id, book_id, status),
            f"save_to_library {status.value} book={book_id}",
        )

    async def wait_idle(self) -> None:
        """Wait for every outstanding write to finish."""
        if self._tasks:
            await asyncio.wait(set(self._tasks))

    def _spawn(self, coro: Awaitable[Any], description: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._run(coro, description))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Awaitable[Any], description: str) -> None:
        try:
            await coro
        except Exception as e:
            logger.warning("[recorder] %s failed: %s: %s", description, type(e).__name__, e)
