"""Root and health endpoints."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()

API_NAME = "Book Discovery API"
API_VERSION = "1.0.0"


@router.get("/")
def root():
    state = get_state()
    return {
        "name": API_NAME,
        "version": API_VERSION,
        "mode": "development" if state.dev_mode else "production",
        "active_sessions": len(state.sessions),
        "endpoints": {
            "auth": ["/api/auth/token", "/api/auth/demo"],
            "discovery": ["/api/sessions/create", "/api/sessions/{id}/{skip|like|dislike|buy}"],
            "books": ["/api/books/search", "/api/books/{id}", "/api/books/{id}/similar"],
            "library": ["/api/users/{user_id}/library", "/api/library/{id}"],
            "reviews": ["/api/users/{user_id}/reviews", "/api/reviews/{id}"],
            "profile": ["/api/users/{user_id}/profile"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    config = state.config
    ok, errors = config.validate()
    return {
        "status": "healthy",
        "app_env": config.app_env,
        "data_store": type(state.data_store).__name__,
        "google_books": {"api_key_set": bool(config.google_books_api_key)},
        "config": {"valid": ok, "errors": errors},
    }
