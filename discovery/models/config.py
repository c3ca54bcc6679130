"""
Feed configuration: prefetch policy and subject rotation.

FeedConfig defaults are defined here. The server builds one from its
environment (PREFETCH_THRESHOLD, FEED_BATCH_SIZE, REQUEST_TIMEOUT);
from_dict() merges overrides with these defaults.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_SUBJECTS = [
    "fiction",
    "mystery",
    "science fiction",
    "romance",
    "biography",
    "history",
    "self help",
    "fantasy",
    "thriller",
    "literary fiction",
    "philosophy",
    "psychology",
]


class FeedConfig(BaseModel):
    """Configuration for the discovery feed."""

    # -------------------------------------------------------------------------
    # Prefetch
    # -------------------------------------------------------------------------

    # A background refill starts when fewer than this many books remain queued.
    prefetch_threshold: int = Field(default=3, ge=0)

    # Books requested from the search API per refill. Google Books caps at 40.
    batch_size: int = Field(default=10, ge=1, le=40)

    # -------------------------------------------------------------------------
    # Feed source
    # -------------------------------------------------------------------------

    # Topic queries rotated through on each refill (sent as subject:<name>).
    subjects: List[str] = Field(default_factory=lambda: list(DEFAULT_SUBJECTS))

    # Sort order passed to the search API.
    order_by: str = "relevance"

    # -------------------------------------------------------------------------
    # Network
    # -------------------------------------------------------------------------

    # Seconds before a search or data store call is abandoned.
    request_timeout: float = Field(default=15.0, gt=0)

    @field_validator("subjects")
    @classmethod
    def subjects_not_empty(cls, value: List[str]) -> List[str]:
        cleaned = [s.strip() for s in value if s and s.strip()]
        if not cleaned:
            raise ValueError("At least one feed subject is required")
        return cleaned

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "FeedConfig":
        """Create config from a dictionary, ignoring unknown keys."""
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in config_dict.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = FeedConfig()


def resolve_config(config: Optional["FeedConfig"]) -> "FeedConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
