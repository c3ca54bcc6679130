"""User profile: display name and reading stats."""

from fastapi import APIRouter, Depends

from ..dependencies import get_app_state, get_store, upstream_error
from ..models import ProfileResponse
from ..services import DataStore, DataStoreError
from ..services.auth import DEFAULT_DISPLAY_NAME
from ..state import AppState

router = APIRouter()


@router.get("/{user_id}/profile", response_model=ProfileResponse)
def get_profile(
    user_id: str,
    store: DataStore = Depends(get_store),
    state: AppState = Depends(get_app_state),
):
    try:
        stats = store.fetch_user_stats(user_id)
    except DataStoreError as e:
        raise upstream_error(e)
    return ProfileResponse(
        user_id=user_id,
        display_name=state.display_names.get(user_id, DEFAULT_DISPLAY_NAME),
        stats=stats,
    )
