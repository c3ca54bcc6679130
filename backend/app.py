"""
Book Discovery API: FastAPI app factory.

Use: uvicorn backend.app:app
Or:  python -m backend
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import ConfigError, get_config
from .logger import configure_logging
from .routes import register_routes
from .state import get_state

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build FastAPI app with CORS, routes, and startup/shutdown hooks."""
    app = FastAPI(
        title="Book Discovery API",
        description="Swipe-style book discovery feed over Google Books, with a Supabase-backed library",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)

    @app.on_event("startup")
    def _startup():
        configure_logging(get_config().log_level)
        try:
            state = get_state()
        except ConfigError as e:
            logger.error("[startup] Invalid backend configuration for a release build: %s", e)
            raise
        config = state.config
        logger.info("[startup] Book Discovery API starting (%s build)", config.app_env)
        logger.info("[startup] Google Books: %s (API key %s)",
                    config.google_books_base_url, "set" if config.google_books_api_key else "not set")
        ok, errors = config.validate()
        if not ok:
            for error in errors:
                logger.warning("[startup] %s", error)

    @app.on_event("shutdown")
    async def _shutdown():
        state = get_state()
        logger.info("[shutdown] closing %d session(s)", len(state.sessions))
        await state.shutdown()

    return app


app = create_app()
