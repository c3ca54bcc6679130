"""Discovery feed endpoints: one session per open feed, one endpoint per gesture."""

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Header

from discovery import DiscoverySession

from ..dependencies import get_session_or_404
from ..models import CreateSessionRequest, SessionResponse
from ..state import get_state
from ..utils import bearer_token, to_session_response

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create", response_model=SessionResponse)
async def create_session(
    request: Optional[CreateSessionRequest] = None,
    authorization: Optional[str] = Header(default=None),
):
    """
    Open a feed: load the user's swipe history, fetch the first batch and show
    the first book. Falls back to the built-in samples when the search API fails.
    """
    state = get_state()
    user_id = request.user_id if request else None
    session = state.create_session(user_id, bearer_token(authorization))
    logger.info("[sessions] create session=%s user=%r", session.session_id, user_id)
    await session.load()
    logger.info(
        "[sessions] session=%s loaded: queued=%d seen=%d fallback=%s",
        session.session_id, len(session.queue), len(session.seen), session.using_fallback,
    )
    return to_session_response(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session_info(session: DiscoverySession = Depends(get_session_or_404)):
    """Current state. Waits for a pending refill if the feed ran dry."""
    await session.ensure_current()
    return to_session_response(session)


async def _gesture(session: DiscoverySession, action: Callable[[], object]) -> SessionResponse:
    action()
    await session.ensure_current()
    return to_session_response(session)


@router.post("/{session_id}/skip", response_model=SessionResponse)
async def skip(session: DiscoverySession = Depends(get_session_or_404)):
    """Swipe up: next book, nothing recorded remotely."""
    return await _gesture(session, session.skip)


@router.post("/{session_id}/dislike", response_model=SessionResponse)
async def dislike(session: DiscoverySession = Depends(get_session_or_404)):
    """Swipe left."""
    return await _gesture(session, session.dislike)


@router.post("/{session_id}/like", response_model=SessionResponse)
async def like(session: DiscoverySession = Depends(get_session_or_404)):
    """Double tap: like and save to the want-to-read shelf."""
    return await _gesture(session, session.like)


@router.post("/{session_id}/buy", response_model=SessionResponse)
async def buy(session: DiscoverySession = Depends(get_session_or_404)):
    """Swipe right: save, then return purchase links for the same book."""
    return await _gesture(session, session.buy)


@router.post("/{session_id}/dismiss-purchase", response_model=SessionResponse)
async def dismiss_purchase(session: DiscoverySession = Depends(get_session_or_404)):
    return await _gesture(session, session.dismiss_purchase)


@router.post("/{session_id}/previous", response_model=SessionResponse)
async def previous(session: DiscoverySession = Depends(get_session_or_404)):
    """Swipe down: back to the previous book."""
    return await _gesture(session, session.previous)


@router.delete("/{session_id}")
def close_session(session: DiscoverySession = Depends(get_session_or_404)):
    get_state().close_session(session.session_id)
    return {"status": "ok", "session_id": session.session_id}
