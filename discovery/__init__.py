"""
Book discovery feed.

- models/: Book, FeedConfig, library and swipe models
- seen: SeenSet (session-local seen ids, loaded from swipe history)
- source: FeedSource (subject rotation over the search API), SampleSource
- prefetch: PrefetchQueue (FIFO lookahead with background refill)
- recorder: InteractionRecorder (fire-and-forget remote writes)
- session: DiscoverySession (gesture handling over the above)
"""

from .models import Book, BookStatus, FeedConfig, SwipeType
from .prefetch import PrefetchQueue
from .recorder import InteractionRecorder
from .samples import SAMPLE_BOOKS
from .seen import SeenSet
from .session import DiscoverySession
from .source import FeedSource, SampleSource

__all__ = [
    "Book",
    "BookStatus",
    "DiscoverySession",
    "FeedConfig",
    "FeedSource",
    "InteractionRecorder",
    "PrefetchQueue",
    "SAMPLE_BOOKS",
    "SampleSource",
    "SeenSet",
    "SwipeType",
]
