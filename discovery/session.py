"""
Discovery session: one user's swipe feed.

Owns the seen set, the prefetch queue and the book currently on screen.
Gesture handlers are synchronous and never wait on the network: remote
writes go through the InteractionRecorder, refills run in the background.

Gestures:
    skip        swipe up       next book
    dislike     swipe left     record dislike, next book
    like        double tap     record like, save to library, next book
    buy         swipe right    record buy, save to library, open purchase sheet
    previous    swipe down     back to the previously shown book
"""

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Optional

from .models.book import Book
from .models.config import FeedConfig, resolve_config
from .models.library import BookStatus
from .models.swipe import SwipeType
from .prefetch import PrefetchQueue
from .recorder import InteractionRecorder
from .seen import SeenSet, SwipeHistory
from .source import BatchSource

logger = logging.getLogger(__name__)

MAX_HISTORY = 100


class DiscoverySession:
    def __init__(
        self,
        session_id: str,
        user_id: Optional[str],
        source: BatchSource,
        recorder: InteractionRecorder,
        history: Optional[SwipeHistory] = None,
        config: Optional[FeedConfig] = None,
        fallback: Optional[BatchSource] = None,
    ):
        self.session_id = session_id
        self.user_id = user_id
        self._source = source
        self._recorder = recorder
        self._history_store = history
        self._fallback = fallback
        self._config = resolve_config(config)
        self.seen = SeenSet()
        self.queue = self._new_queue()
        self.current: Optional[Book] = None
        self.history: Deque[Book] = deque(maxlen=MAX_HISTORY)
        self.show_purchase_sheet = False
        self.using_fallback = False
        self.loaded = False
        self.created_at = datetime.now(timezone.utc).isoformat()

    def _new_queue(self) -> PrefetchQueue:
        return PrefetchQueue(
            self._source,
            self.seen,
            threshold=self._config.prefetch_threshold,
            timeout=self._config.request_timeout,
        )

    async def load(self) -> Optional[Book]:
        """
        Load the seen set, fill the queue and show the first book.

        The initial refill is the queue's tracked refill task, so a gesture
        arriving meanwhile replaces it rather than racing it. When the feed
        is still empty afterwards (API down, or every result already seen)
        the built-in samples are queued instead, seen or not.
        """
        history = await SeenSet.load(self._history_store, self.user_id)
        self.seen.update(history)
        self.queue.schedule_refill()
        await self.queue.wait_for_refill()
        if not len(self.queue) and self.current is None and self._fallback is not None:
            samples = await self._fallback.fetch_batch()
            self.queue.seed(samples, filter_seen=False)
            self.using_fallback = True
            logger.info(
                "[session %s] feed empty after first refill, using %d sample books",
                self.session_id, len(self.queue),
            )
        self.loaded = True
        if self.current is None:
            self._advance()
        return self.current

    # Gestures

    def skip(self) -> Optional[Book]:
        if self.current is not None:
            self.seen.mark_seen(self.current.id)
        self._advance()
        return self.current

    def dislike(self) -> Optional[Book]:
        book = self.current
        if book is None:
            return None
        self._record(book, SwipeType.DISLIKE)
        self._advance()
        return self.current

    def like(self) -> Optional[Book]:
        book = self.current
        if book is None:
            return None
        self._record(book, SwipeType.LIKE)
        self._recorder.save_to_library(self.user_id, book.id, BookStatus.WANT_TO_READ)
        self._advance()
        return self.current

    def buy(self) -> Optional[Book]:
        """Record a buy and open the purchase sheet. Stays on the same book."""
        book = self.current
        if book is None:
            return None
        self._record(book, SwipeType.BUY)
        self._recorder.save_to_library(self.user_id, book.id, BookStatus.WANT_TO_READ)
        self.show_purchase_sheet = True
        return book

    def dismiss_purchase(self) -> Optional[Book]:
        self.show_purchase_sheet = False
        self._advance()
        return self.current

    def previous(self) -> Optional[Book]:
        if not self.history:
            return self.current
        if self.current is not None:
            self.queue.push_front(self.current)
        self.current = self.history.pop()
        self.show_purchase_sheet = False
        return self.current

    async def ensure_current(self) -> Optional[Book]:
        """When the feed ran dry, wait for a refill and show its first book."""
        if self.current is not None or not self.loaded:
            return self.current
        if not len(self.queue):
            if not self.queue.refilling:
                self.queue.schedule_refill()
            await self.queue.wait_for_refill()
        if self.current is None and len(self.queue):
            self.current = self.queue.next_item()
        return self.current

    async def wait_idle(self) -> None:
        await self.queue.wait_for_refill()
        await self._recorder.wait_idle()

    def close(self) -> None:
        self.queue.close()

    def _record(self, book: Book, action: SwipeType) -> None:
        self.seen.mark_seen(book.id)
        self._recorder.record_swipe(self.user_id, book.id, action)

    def _advance(self) -> None:
        if self.current is not None:
            self.history.append(self.current)
        self.current = self.queue.next_item()
