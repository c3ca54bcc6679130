"""FastAPI dependencies: app state, per-request data store, session lookup, error mapping."""

from typing import Optional

from fastapi import Depends, Header, HTTPException

from discovery import DiscoverySession

from .services import DataStore, UnauthorizedError
from .state import AppState, get_state
from .utils import bearer_token


def get_app_state() -> AppState:
    return get_state()


def get_store(
    authorization: Optional[str] = Header(default=None),
    state: AppState = Depends(get_app_state),
) -> DataStore:
    """Data store bound to the caller's bearer token."""
    return state.store_for(bearer_token(authorization))


def get_session_or_404(session_id: str, state: AppState = Depends(get_app_state)) -> DiscoverySession:
    session = state.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def upstream_error(e: Exception) -> HTTPException:
    """Map a service error to a response. The service message is user-facing."""
    if isinstance(e, UnauthorizedError):
        return HTTPException(status_code=401, detail=str(e))
    return HTTPException(status_code=502, detail=str(e))
