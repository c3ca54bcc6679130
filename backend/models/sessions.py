"""Discovery session Pydantic models."""

from typing import Optional

from pydantic import BaseModel

from .common import BookCard


class CreateSessionRequest(BaseModel):
    user_id: Optional[str] = None


class SessionResponse(BaseModel):
    session_id: str
    current: Optional[BookCard] = None
    queued_count: int
    seen_count: int
    history_count: int
    show_purchase_sheet: bool = False
    using_fallback: bool = False
    refilling: bool = False
