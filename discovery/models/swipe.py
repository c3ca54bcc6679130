"""
Swipe model: a user's recorded reaction to a book in the discovery feed.

Stored remotely in the swipe_history collection; the ids in that history
seed the seen set at the start of each session.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class SwipeType(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    BUY = "buy"


class SwipeAction(BaseModel):
    """One row of swipe history."""

    id: Optional[str] = None
    user_id: str
    google_books_id: str
    action: SwipeType
    swiped_at: Optional[str] = None
