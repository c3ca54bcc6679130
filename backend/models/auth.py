"""Sign-in request/response models."""

from typing import Optional

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    """ID token from the identity provider. display_name only arrives on first sign in."""

    id_token: str = Field(min_length=1)
    provider: str = "apple"
    display_name: Optional[str] = None


class AuthResponse(BaseModel):
    user_id: str
    access_token: str
    refresh_token: Optional[str] = None
    display_name: str
