"""Application state: API clients, data store, and live discovery sessions."""

import logging
import uuid
from typing import Dict, Optional

from discovery import DiscoverySession, FeedSource, InteractionRecorder, SampleSource

from .config import ServerConfig, get_config
from .services import (
    AuthService,
    DataStore,
    GoogleBooksClient,
    InMemoryDataStore,
    SupabaseDataStore,
)

logger = logging.getLogger(__name__)


class AppState:
    """Global application state. Clients can be injected for tests."""

    def __init__(
        self,
        config: ServerConfig,
        books_client: Optional[GoogleBooksClient] = None,
        data_store: Optional[DataStore] = None,
        auth_service: Optional[AuthService] = None,
    ):
        self.config = config
        self.feed_config = config.feed_config()

        self.books_client = books_client or GoogleBooksClient(
            api_key=config.google_books_api_key,
            base_url=config.google_books_base_url,
            timeout=config.request_timeout,
        )

        # Data store: Supabase when configured, else in-memory (debug builds only)
        self.data_store = data_store if data_store is not None else self._create_data_store(config)
        logger.info("[startup] Data store: %s", type(self.data_store).__name__)

        self.auth_service = auth_service or AuthService(
            config.supabase_url,
            config.supabase_anon_key,
            timeout=config.request_timeout,
        )

        # Display names seen at sign in (the identity provider only sends them once)
        self.display_names: Dict[str, str] = {}

        # Session storage
        self.sessions: Dict[str, DiscoverySession] = {}

    def _create_data_store(self, config: ServerConfig) -> DataStore:
        config.ensure_valid_for_release()
        if config.supabase_configured:
            return SupabaseDataStore(
                config.supabase_url,
                config.supabase_anon_key,
                timeout=config.request_timeout,
            )
        logger.warning(
            "[startup] SUPABASE_URL / SUPABASE_ANON_KEY not set, using in-memory data store (development mode)"
        )
        return InMemoryDataStore()

    @property
    def dev_mode(self) -> bool:
        return isinstance(self.data_store, InMemoryDataStore)

    def store_for(self, access_token: Optional[str]) -> DataStore:
        return self.data_store.for_token(access_token)

    def create_session(self, user_id: Optional[str], access_token: Optional[str] = None) -> DiscoverySession:
        """Build (but don't load) a discovery session for this user."""
        store = self.store_for(access_token)
        session_id = str(uuid.uuid4())[:8]
        session = DiscoverySession(
            session_id=session_id,
            user_id=user_id,
            source=FeedSource(self.books_client, self.feed_config),
            recorder=InteractionRecorder(store),
            history=store,
            config=self.feed_config,
            fallback=SampleSource(),
        )
        self.sessions[session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[DiscoverySession]:
        return self.sessions.get(session_id)

    def close_session(self, session_id: str) -> bool:
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    async def shutdown(self) -> None:
        """Cancel refills, flush pending writes, close HTTP clients."""
        for session in list(self.sessions.values()):
            session.close()
            await session.wait_idle()
        self.sessions.clear()
        await self.books_client.aclose()
        self.books_client.close()
        if isinstance(self.data_store, SupabaseDataStore):
            await self.data_store.aclose()
            self.data_store.close()
        self.auth_service.close()


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Replace the global state (tests, embedding apps)."""
    global _state
    _state = state
