"""
Feed sources: where the prefetch queue gets its next batch of books.

FeedSource rotates through subject queries against the search API and pages
through each subject independently. SampleSource serves the built-in list.
"""

import logging
import random
from typing import Dict, List, Optional, Protocol

from .models.book import Book
from .models.config import FeedConfig, resolve_config
from .samples import SAMPLE_BOOKS

logger = logging.getLogger(__name__)


class BookSearch(Protocol):
    """Async keyword search over the book catalog."""

    async def search_books_async(
        self,
        query: str,
        start_index: int = 0,
        max_results: int = 20,
        order_by: str = "relevance",
    ) -> List[Book]:
        ...


class BatchSource(Protocol):
    """Anything the prefetch queue can pull a batch from."""

    async def fetch_batch(self) -> List[Book]:
        ...


class FeedSource:
    """
    Subject-rotating source over a paginated search API.

    The subject order is shuffled once per source so two sessions don't walk
    the catalog in lockstep. Each subject keeps its own page offset; a page
    that comes back empty sends that subject back to the start.
    """

    def __init__(
        self,
        search: BookSearch,
        config: Optional[FeedConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self._search = search
        self._config = resolve_config(config)
        self._rng = rng or random.Random()
        self._subjects: List[str] = list(self._config.subjects)
        self._rng.shuffle(self._subjects)
        self._cursor = 0
        self._offsets: Dict[str, int] = {s: 0 for s in self._subjects}

    @property
    def subjects(self) -> List[str]:
        return list(self._subjects)

    def offset_for(self, subject: str) -> int:
        return self._offsets.get(subject, 0)

    def next_subject(self) -> str:
        subject = self._subjects[self._cursor % len(self._subjects)]
        self._cursor += 1
        return subject

    async def fetch_batch(self) -> List[Book]:
        """Fetch the next page of the next subject. Errors propagate."""
        subject = self.next_subject()
        start_index = self._offsets[subject]
        batch_size = self._config.batch_size
        books = await self._search.search_books_async(
            f"subject:{subject}",
            start_index=start_index,
            max_results=batch_size,
            order_by=self._config.order_by,
        )
        if books:
            self._offsets[subject] = start_index + batch_size
        else:
            self._offsets[subject] = 0
        logger.debug(
            "[source] subject=%r start=%d returned %d books", subject, start_index, len(books)
        )
        return books


class SampleSource:
    """The fixed built-in sample list."""

    def __init__(self, books: Optional[List[Book]] = None):
        self._books = list(books) if books is not None else list(SAMPLE_BOOKS)

    async def fetch_batch(self) -> List[Book]:
        return list(self._books)
