"""
Auth service tests: ID token exchange against the Supabase auth endpoint.

Run:
----
    pytest tests/test_auth_service.py -v
"""

from unittest.mock import Mock

import pytest
import requests

from backend.services import AuthError, AuthService
from backend.services.auth import DEMO_USER_ID

from fakes import FakeResponse

URL = "https://project.supabase.example"
USER_ID = "6f1c2d3e-4a5b-4c6d-8e9f-0a1b2c3d4e5f"


def _service(response=None, error=None, url=URL, anon_key="anon"):
    session = Mock(spec=requests.Session)
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value = response
    return AuthService(url, anon_key, session=session), session


class TestSignIn:
    def test_exchanges_id_token(self):
        payload = {"access_token": "at", "refresh_token": "rt", "user": {"id": USER_ID}}
        service, session = _service(FakeResponse(200, payload))
        result = service.sign_in_with_id_token(" id-token ", display_name="Ada")
        assert result.user_id == USER_ID
        assert result.access_token == "at"
        assert result.refresh_token == "rt"
        assert result.display_name == "Ada"
        args, kwargs = session.post.call_args
        assert args[0] == f"{URL}/auth/v1/token"
        assert kwargs["params"] == {"grant_type": "id_token"}
        assert kwargs["json"] == {"provider": "apple", "id_token": "id-token"}
        assert kwargs["headers"]["apikey"] == "anon"

    def test_display_name_defaults_to_reader(self):
        payload = {"access_token": "at", "user": {"id": USER_ID}}
        service, _ = _service(FakeResponse(200, payload))
        assert service.sign_in_with_id_token("tok", display_name="  ").display_name == "Reader"

    def test_empty_token(self):
        service, session = _service(FakeResponse(200, {}))
        with pytest.raises(AuthError):
            service.sign_in_with_id_token("   ")
        session.post.assert_not_called()

    def test_not_configured(self):
        service, _ = _service(FakeResponse(200, {}), url=None, anon_key=None)
        with pytest.raises(AuthError, match="not configured"):
            service.sign_in_with_id_token("tok")

    def test_rejected(self):
        service, _ = _service(FakeResponse(400, {"error": "invalid_grant"}))
        with pytest.raises(AuthError, match="Authentication with server failed"):
            service.sign_in_with_id_token("tok")

    def test_network_error(self):
        service, _ = _service(error=requests.ConnectionError("down"))
        with pytest.raises(AuthError):
            service.sign_in_with_id_token("tok")

    def test_invalid_user_id(self):
        payload = {"access_token": "at", "user": {"id": "not-a-uuid"}}
        service, _ = _service(FakeResponse(200, payload))
        with pytest.raises(AuthError, match="Invalid user ID"):
            service.sign_in_with_id_token("tok")

    def test_missing_fields(self):
        service, _ = _service(FakeResponse(200, {"user": {}}))
        with pytest.raises(AuthError):
            service.sign_in_with_id_token("tok")


def test_demo_session():
    session = AuthService.demo_session()
    assert session.user_id == DEMO_USER_ID
    assert session.display_name == "Demo User"
