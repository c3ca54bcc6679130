"""
Auth service: exchange an identity-provider token for a data store session.

The client signs in with the identity provider (Sign in with Apple) and
posts the resulting ID token here; Supabase GoTrue verifies it and returns
an access token for the REST data store. Development builds can also hand
out a fixed demo session.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "Reader"
DEMO_USER_ID = "00000000-0000-0000-0000-000000000001"
DEMO_DISPLAY_NAME = "Demo User"
DEMO_ACCESS_TOKEN = "demo_access_token"


class AuthError(Exception):
    """str(e) is safe to show to users."""


@dataclass
class AuthSession:
    user_id: str
    access_token: str
    refresh_token: Optional[str] = None
    display_name: str = DEFAULT_DISPLAY_NAME


class AuthService:
    def __init__(
        self,
        supabase_url: Optional[str],
        anon_key: Optional[str],
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self._url = (supabase_url or "").rstrip("/")
        self._anon_key = anon_key
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def token_url(self) -> str:
        return f"{self._url}/auth/v1/token"

    def sign_in_with_id_token(
        self,
        id_token: str,
        provider: str = "apple",
        display_name: Optional[str] = None,
    ) -> AuthSession:
        """
        Exchange an ID token for an access token.

        display_name is only sent by Apple on the first sign in; when absent
        the session falls back to "Reader".
        """
        if not id_token or not id_token.strip():
            raise AuthError("Invalid sign in credential.")
        if not self._url or not self._anon_key:
            raise AuthError("Authentication is not configured.")
        try:
            response = self._session.post(
                self.token_url,
                params={"grant_type": "id_token"},
                json={"provider": provider, "id_token": id_token.strip()},
                headers={"apikey": self._anon_key, "Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("[auth] token exchange request failed: %s", e)
            raise AuthError("Authentication with server failed.") from e
        if response.status_code != 200:
            logger.warning("[auth] token exchange rejected: HTTP %s", response.status_code)
            raise AuthError("Authentication with server failed.")
        try:
            data = response.json()
            access_token = data["access_token"]
            raw_user_id = data["user"]["id"]
        except (ValueError, KeyError, TypeError) as e:
            raise AuthError("Authentication with server failed.") from e
        try:
            user_id = str(uuid.UUID(str(raw_user_id)))
        except ValueError as e:
            raise AuthError("Invalid user ID from server.") from e
        name = (display_name or "").strip() or DEFAULT_DISPLAY_NAME
        logger.info("[auth] signed in user=%s via %s", user_id, provider)
        return AuthSession(
            user_id=user_id,
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            display_name=name,
        )

    @staticmethod
    def demo_session() -> AuthSession:
        """Fixed session for development builds."""
        return AuthSession(
            user_id=DEMO_USER_ID,
            access_token=DEMO_ACCESS_TOKEN,
            display_name=DEMO_DISPLAY_NAME,
        )

    def close(self) -> None:
        self._session.close()
