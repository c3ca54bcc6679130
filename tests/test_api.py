"""
API tests: the FastAPI app with an in-memory data store and a fake catalog.

The client is used as a context manager so startup/shutdown hooks run and
all requests share one event loop (background refills and writes live on it).

Run:
----
    pytest tests/test_api.py -v
"""

import asyncio
from unittest.mock import Mock

import httpx
import pytest
import requests
from fastapi.testclient import TestClient

from backend.app import create_app
from backend.config import ServerConfig
from backend.services import AuthService, GoogleBooksError, InMemoryDataStore, SupabaseDataStore
from backend.services.auth import DEMO_USER_ID
from backend.state import AppState, set_state

from fakes import FakeBooksClient, FakeResponse, GatedBooksClient

USER_ID = "6f1c2d3e-4a5b-4c6d-8e9f-0a1b2c3d4e5f"


def _state(books_client=None, data_store=None, auth_response=None):
    auth_session = Mock(spec=requests.Session)
    auth_session.post.return_value = auth_response
    state = AppState(
        ServerConfig(supabase_url="https://project.supabase.example", supabase_anon_key="anon"),
        books_client=books_client or FakeBooksClient(),
        data_store=data_store if data_store is not None else InMemoryDataStore(),
        auth_service=AuthService("https://project.supabase.example", "anon", session=auth_session),
    )
    set_state(state)
    return state


@pytest.fixture
def state():
    return _state()


@pytest.fixture
def client(state):
    with TestClient(create_app()) as c:
        yield c


def _flush(client, state, session_id):
    """Wait for the session's background refill and writes."""
    client.portal.call(state.get_session(session_id).wait_idle)


class TestRoot:
    def test_root(self, client):
        data = client.get("/").json()
        assert data["name"] == "Book Discovery API"
        assert data["mode"] == "development"
        assert data["active_sessions"] == 0

    def test_health(self, client):
        data = client.get("/api/health").json()
        assert data["status"] == "healthy"
        assert data["data_store"] == "InMemoryDataStore"
        assert data["config"]["valid"]


class TestAuth:
    def test_demo_sign_in(self, client):
        data = client.post("/api/auth/demo").json()
        assert data["user_id"] == DEMO_USER_ID
        assert data["display_name"] == "Demo User"

    def test_token_exchange(self):
        payload = {"access_token": "at", "user": {"id": USER_ID}}
        _state(auth_response=FakeResponse(200, payload))
        with TestClient(create_app()) as client:
            response = client.post("/api/auth/token", json={"id_token": "tok", "display_name": "Ada"})
            assert response.status_code == 200
            assert response.json()["display_name"] == "Ada"

            # Later sign ins carry no name; the first one is kept.
            again = client.post("/api/auth/token", json={"id_token": "tok"}).json()
            assert again["display_name"] == "Ada"

            profile = client.get(f"/api/users/{USER_ID}/profile").json()
            assert profile["display_name"] == "Ada"

    def test_token_rejected(self):
        _state(auth_response=FakeResponse(400, {"error": "invalid_grant"}))
        with TestClient(create_app()) as client:
            response = client.post("/api/auth/token", json={"id_token": "tok"})
            assert response.status_code == 401
            assert response.json()["detail"] == "Authentication with server failed."

    def test_empty_token_is_validation_error(self, client):
        assert client.post("/api/auth/token", json={"id_token": ""}).status_code == 422

    def test_demo_unavailable_with_hosted_store(self):
        store = SupabaseDataStore("https://project.supabase.example", "anon", session=Mock(spec=requests.Session))
        _state(data_store=store)
        with TestClient(create_app()) as client:
            assert client.post("/api/auth/demo").status_code == 404


class TestSessions:
    def test_create_shows_first_book(self, client, state):
        data = client.post("/api/sessions/create", json={"user_id": "u1"}).json()
        assert data["current"] is not None
        assert data["queued_count"] == 9
        assert data["seen_count"] == 0
        assert not data["using_fallback"]
        assert data["current"]["purchase_links"] is None
        assert data["session_id"] in state.sessions

    def test_create_without_body(self, client):
        response = client.post("/api/sessions/create")
        assert response.status_code == 200
        assert response.json()["current"] is not None

    def test_like_records_and_advances(self, client, state):
        created = client.post("/api/sessions/create", json={"user_id": "u1"}).json()
        session_id = created["session_id"]
        first = created["current"]["id"]

        data = client.post(f"/api/sessions/{session_id}/like").json()
        assert data["current"]["id"] != first
        assert data["history_count"] == 1
        assert data["seen_count"] == 1

        _flush(client, state, session_id)
        assert [(s["google_books_id"], s["action"]) for s in state.data_store.swipes] == [(first, "like")]
        library = client.get("/api/users/u1/library").json()
        assert [row["google_books_id"] for row in library["want_to_read"]] == [first]

    def test_buy_returns_purchase_links(self, client, state):
        session_id = client.post("/api/sessions/create", json={"user_id": "u1"}).json()["session_id"]
        before = client.get(f"/api/sessions/{session_id}").json()["current"]["id"]

        data = client.post(f"/api/sessions/{session_id}/buy").json()
        assert data["show_purchase_sheet"]
        assert data["current"]["id"] == before
        assert data["current"]["purchase_links"]["amazon"].startswith("https://www.amazon.com/s?k=")

        data = client.post(f"/api/sessions/{session_id}/dismiss-purchase").json()
        assert not data["show_purchase_sheet"]
        assert data["current"]["id"] != before

    def test_skip_and_previous(self, client):
        created = client.post("/api/sessions/create", json={}).json()
        session_id = created["session_id"]
        first = created["current"]["id"]

        skipped = client.post(f"/api/sessions/{session_id}/skip").json()
        assert skipped["current"]["id"] != first
        back = client.post(f"/api/sessions/{session_id}/previous").json()
        assert back["current"]["id"] == first
        assert back["history_count"] == 0

    def test_dislike(self, client, state):
        created = client.post("/api/sessions/create", json={"user_id": "u1"}).json()
        session_id = created["session_id"]
        client.post(f"/api/sessions/{session_id}/dislike")
        _flush(client, state, session_id)
        assert [s["action"] for s in state.data_store.swipes] == ["dislike"]
        assert client.get("/api/users/u1/library").json()["want_to_read"] == []

    def test_swiped_books_excluded_from_next_session(self, client, state):
        created = client.post("/api/sessions/create", json={"user_id": "u1"}).json()
        first = created["current"]["id"]
        client.post(f"/api/sessions/{created['session_id']}/dislike")
        _flush(client, state, created["session_id"])

        again = client.post("/api/sessions/create", json={"user_id": "u1"}).json()
        assert again["seen_count"] == 1
        session = state.get_session(again["session_id"])
        shown = [again["current"]["id"]] + [b.id for b in session.queue.items]
        assert first not in shown

    def test_fallback_when_catalog_unreachable(self):
        _state(books_client=FakeBooksClient(fail=GoogleBooksError()))
        with TestClient(create_app()) as client:
            data = client.post("/api/sessions/create", json={"user_id": "u1"}).json()
            assert data["using_fallback"]
            assert data["current"]["title"] == "The Seven Husbands of Evelyn Hugo"

    def test_unknown_session(self, client):
        assert client.get("/api/sessions/nope").status_code == 404
        assert client.post("/api/sessions/nope/like").status_code == 404

    def test_delete_session(self, client, state):
        session_id = client.post("/api/sessions/create", json={}).json()["session_id"]
        assert client.delete(f"/api/sessions/{session_id}").json()["status"] == "ok"
        assert session_id not in state.sessions
        assert client.get(f"/api/sessions/{session_id}").status_code == 404


class TestBooks:
    def test_search(self, client):
        data = client.get("/api/books/search", params={"q": "dune", "limit": 5}).json()
        assert data["count"] == 5
        assert data["books"][0]["id"] == "dune-0"

    def test_empty_search_rejected(self, client):
        assert client.get("/api/books/search", params={"q": "  "}).status_code == 400

    def test_limit_bounds(self, client):
        assert client.get("/api/books/search", params={"q": "dune", "limit": 41}).status_code == 422

    def test_details_include_purchase_links(self, client):
        data = client.get("/api/books/abc").json()
        assert data["id"] == "abc"
        assert data["purchase_links"]["bookshop"].startswith("https://bookshop.org/search?keywords=")

    def test_details_upstream_error(self, client):
        response = client.get("/api/books/missing-1")
        assert response.status_code == 502
        assert "404" in response.json()["detail"]

    def test_similar(self, client):
        data = client.get("/api/books/abc/similar", params={"limit": 3}).json()
        assert data["count"] == 3

    def test_search_catalog_down(self):
        _state(books_client=FakeBooksClient(fail=GoogleBooksError()))
        with TestClient(create_app()) as client:
            response = client.get("/api/books/search", params={"q": "dune"})
            assert response.status_code == 502
            assert response.json()["detail"] == "Could not reach the book catalog."


class TestLibrary:
    def test_add_list_move_delete(self, client):
        response = client.post("/api/users/u1/library", json={"google_books_id": "abc"})
        assert response.status_code == 201
        row = response.json()
        assert row["status"] == "want_to_read"
        assert row["status_display"] == "Want to Read"

        library = client.get("/api/users/u1/library").json()
        assert library["want_to_read"][0]["book"]["id"] == "abc"

        client.patch(f"/api/library/{row['id']}", json={"status": "read"})
        library = client.get("/api/users/u1/library").json()
        assert library["want_to_read"] == []
        assert library["read"][0]["id"] == row["id"]

        client.delete(f"/api/library/{row['id']}")
        library = client.get("/api/users/u1/library").json()
        assert library == {"want_to_read": [], "reading": [], "read": []}

    def test_rows_kept_when_details_unavailable(self, client):
        client.post("/api/users/u1/library", json={"google_books_id": "missing-9", "status": "reading"})
        library = client.get("/api/users/u1/library").json()
        assert library["reading"][0]["google_books_id"] == "missing-9"
        assert library["reading"][0]["book"] is None

    def test_invalid_status(self, client):
        response = client.post("/api/users/u1/library", json={"google_books_id": "abc", "status": "lost"})
        assert response.status_code == 422

    def test_unauthorized_store(self):
        session = Mock(spec=requests.Session)
        session.request.return_value = FakeResponse(401, {"message": "JWT expired"})
        _state(data_store=SupabaseDataStore("https://project.supabase.example", "anon", session=session))
        with TestClient(create_app()) as client:
            response = client.get("/api/users/u1/library", headers={"Authorization": "Bearer expired"})
            assert response.status_code == 401
            _, kwargs = session.request.call_args
            assert kwargs["headers"]["Authorization"] == "Bearer expired"


class TestReviews:
    def test_review_lifecycle(self, client):
        saved = client.put("/api/users/u1/reviews/abc", json={"rating": 4, "review_text": " Good "}).json()
        assert saved["rating"] == 4
        assert saved["review_text"] == "Good"

        updated = client.put("/api/users/u1/reviews/abc", json={"rating": 5}).json()
        assert updated["id"] == saved["id"]
        assert client.get("/api/users/u1/reviews/abc").json()["rating"] == 5
        assert client.get("/api/users/u1/reviews").json()["count"] == 1

        client.delete(f"/api/reviews/{saved['id']}")
        assert client.get("/api/users/u1/reviews/abc").status_code == 404

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_bounds(self, client, rating):
        assert client.put("/api/users/u1/reviews/abc", json={"rating": rating}).status_code == 422


class TestProfile:
    def test_stats(self, client):
        row = client.post("/api/users/u1/library", json={"google_books_id": "a"}).json()
        client.post("/api/users/u1/library", json={"google_books_id": "b"})
        client.patch(f"/api/library/{row['id']}", json={"status": "read"})
        client.put("/api/users/u1/reviews/a", json={"rating": 5})

        profile = client.get("/api/users/u1/profile").json()
        assert profile["display_name"] == "Reader"
        assert profile["stats"] == {"books_read": 1, "reviews_written": 1, "total_books": 2}

    def test_demo_user_name(self, client):
        client.post("/api/auth/demo")
        assert client.get(f"/api/users/{DEMO_USER_ID}/profile").json()["display_name"] == "Demo User"


def test_shutdown_closes_clients():
    books = FakeBooksClient()
    state = _state(books_client=books)
    with TestClient(create_app()) as client:
        client.post("/api/sessions/create", json={})
    assert books.closed
    assert state.sessions == {}


class TestConcurrentRequests:
    """Requests interleaved on one event loop through the ASGI transport."""

    def test_get_racing_gesture_on_dry_feed(self):
        books = GatedBooksClient(open_calls=1, page_size=1)
        state = _state(books_client=books)
        app = create_app()

        async def scenario():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                created = (await client.post("/api/sessions/create", json={"user_id": "u1"})).json()
                session_id = created["session_id"]
                assert created["queued_count"] == 0

                async def release_later():
                    for _ in range(20):
                        await asyncio.sleep(0)
                    books.release()

                skipped, fetched, _ = await asyncio.gather(
                    client.post(f"/api/sessions/{session_id}/skip"),
                    client.get(f"/api/sessions/{session_id}"),
                    release_later(),
                )
                await state.get_session(session_id).wait_idle()
                after = (await client.get(f"/api/sessions/{session_id}")).json()
                return created, skipped.json(), fetched.json(), after

        created, skipped, fetched, after = asyncio.run(scenario())
        assert books.max_active == 1
        assert skipped["current"] is not None
        assert skipped["current"]["id"] != created["current"]["id"]
        assert after["current"]["id"] == skipped["current"]["id"]
        assert fetched["current"] is not None


def test_update_unknown_library_row(client):
    response = client.patch("/api/library/no-such-row", json={"status": "read"})
    assert response.status_code == 502
    assert response.json()["detail"] == "No data returned from server."
