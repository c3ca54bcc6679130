"""
Seen set: ids of books already shown to the user.

Seeded once per session from the user's remote swipe history, then grown
locally as the user interacts. Persisting individual actions is the
recorder's job; this set is never written back.
"""

import logging
from typing import Iterable, Iterator, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class SwipeHistory(Protocol):
    """Remote source of previously swiped book ids."""

    async def fetch_swiped_book_ids_async(self, user_id: str) -> Set[str]:
        ...


class SeenSet:
    """Session-local set of seen book ids. Grows monotonically."""

    def __init__(self, ids: Optional[Iterable[str]] = None):
        self._ids: Set[str] = set(ids or ())

    @classmethod
    async def load(cls, history: Optional[SwipeHistory], user_id: Optional[str]) -> "SeenSet":
        """
        Load the user's swipe history.

        Fails open: any error (or no user / no store) yields an empty set so
        the feed still works, at the cost of maybe repeating old books.
        """
        if history is None or not user_id:
            return cls()
        try:
            ids = await history.fetch_swiped_book_ids_async(user_id)
        except Exception as e:
            logger.warning("[seen] history load failed for user=%r, starting empty: %s", user_id, e)
            return cls()
        logger.debug("[seen] loaded %d ids for user=%r", len(ids), user_id)
        return cls(ids)

    def update(self, ids: Iterable[str]) -> None:
        self._ids.update(ids)

    def mark_seen(self, book_id: str) -> None:
        """Insert an id. Marking twice is the same as marking once."""
        self._ids.add(book_id)

    def __contains__(self, book_id: object) -> bool:
        return book_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)
