"""
Server Configuration

Loads configuration from environment variables and provides defaults.
A .env file at the project root is loaded first using python-dotenv.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from discovery.models.config import FeedConfig

# Single .env at the project root (backend, scripts, Docker)
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)

# Values shipped in templates; treated the same as unset.
PLACEHOLDER_MARKERS = ("YOUR_PROJECT", "your-dev-project", "YOUR_ANON_KEY", "your-dev-anon-key")

DEFAULT_GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1"


class ConfigError(Exception):
    """Backend credentials are missing or invalid in a release build."""


def _is_placeholder(value: Optional[str]) -> bool:
    if not value:
        return True
    return any(marker in value for marker in PLACEHOLDER_MARKERS)


@dataclass
class ServerConfig:
    """Server configuration."""

    # "debug" or "release". Release builds refuse to start without backend credentials.
    app_env: str = "debug"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Book search API
    google_books_api_key: Optional[str] = None
    google_books_base_url: str = DEFAULT_GOOGLE_BOOKS_URL

    # Hosted data store (PostgREST) and its auth endpoint
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    # Feed / network
    request_timeout: float = 15.0
    prefetch_threshold: int = 3
    feed_batch_size: int = 10

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        return cls(
            app_env=os.getenv("APP_ENV", "debug").strip().lower() or "debug",
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
            google_books_api_key=os.getenv("GOOGLE_BOOKS_API_KEY") or None,
            google_books_base_url=os.getenv("GOOGLE_BOOKS_BASE_URL", DEFAULT_GOOGLE_BOOKS_URL).rstrip("/"),
            supabase_url=(os.getenv("SUPABASE_URL") or "").rstrip("/") or None,
            supabase_anon_key=os.getenv("SUPABASE_ANON_KEY") or None,
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "15")),
            prefetch_threshold=int(os.getenv("PREFETCH_THRESHOLD", "3")),
            feed_batch_size=int(os.getenv("FEED_BATCH_SIZE", "10")),
        )

    @property
    def is_release(self) -> bool:
        return self.app_env == "release"

    @property
    def supabase_configured(self) -> bool:
        return not _is_placeholder(self.supabase_url) and not _is_placeholder(self.supabase_anon_key)

    def feed_config(self) -> FeedConfig:
        return FeedConfig(
            prefetch_threshold=self.prefetch_threshold,
            batch_size=self.feed_batch_size,
            request_timeout=self.request_timeout,
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if _is_placeholder(self.supabase_url):
            errors.append("SUPABASE_URL is not configured")
        elif not self.supabase_url.startswith(("https://", "http://")):
            errors.append(f"SUPABASE_URL is invalid: {self.supabase_url}")

        if _is_placeholder(self.supabase_anon_key):
            errors.append("SUPABASE_ANON_KEY is not configured")

        if self.request_timeout <= 0:
            errors.append(f"REQUEST_TIMEOUT must be positive, got {self.request_timeout}")

        return len(errors) == 0, errors

    def ensure_valid_for_release(self) -> None:
        """Raise ConfigError in release builds when validation fails."""
        if not self.is_release:
            return
        ok, errors = self.validate()
        if not ok:
            raise ConfigError("; ".join(errors))


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
