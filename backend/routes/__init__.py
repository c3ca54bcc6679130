"""Register all route modules on the FastAPI app."""

from fastapi import FastAPI

from .auth import router as auth_router
from .books import router as books_router
from .library import router as library_router
from .reviews import router as reviews_router
from .root import router as root_router
from .sessions import router as sessions_router
from .users import router as users_router


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the app."""
    app.include_router(root_router)
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(sessions_router, prefix="/api/sessions", tags=["sessions"])
    app.include_router(books_router, prefix="/api/books", tags=["books"])
    app.include_router(library_router, prefix="/api", tags=["library"])
    app.include_router(reviews_router, prefix="/api", tags=["reviews"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])
