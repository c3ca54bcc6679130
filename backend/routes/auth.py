"""Sign in: identity-provider token exchange, and a demo user for development builds."""

from fastapi import APIRouter, HTTPException

from ..models import AuthResponse, TokenRequest
from ..services import AuthError, AuthSession
from ..services.auth import DEFAULT_DISPLAY_NAME
from ..state import AppState, get_state

router = APIRouter()


def _remember(state: AppState, session: AuthSession) -> AuthResponse:
    known = state.display_names.get(session.user_id)
    if known and session.display_name == DEFAULT_DISPLAY_NAME:
        session.display_name = known
    state.display_names[session.user_id] = session.display_name
    return AuthResponse(
        user_id=session.user_id,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        display_name=session.display_name,
    )


@router.post("/token", response_model=AuthResponse)
def exchange_token(request: TokenRequest):
    """Exchange an identity-provider ID token for a data store access token."""
    state = get_state()
    try:
        session = state.auth_service.sign_in_with_id_token(
            request.id_token,
            provider=request.provider,
            display_name=request.display_name,
        )
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return _remember(state, session)


@router.post("/demo", response_model=AuthResponse)
def demo_sign_in():
    """Demo user. Only available when running without a hosted data store."""
    state = get_state()
    if not state.dev_mode:
        raise HTTPException(status_code=404, detail="Demo sign in is only available in development mode")
    return _remember(state, state.auth_service.demo_session())
