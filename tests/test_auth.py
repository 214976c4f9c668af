"""
Tests for sessions and the session-cookie middleware
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from medusa_storefront.auth import SessionAuthMiddleware
from medusa_storefront.sessions import (
    RENEW_THRESHOLD,
    InMemorySessionStore,
    SessionValidation,
    User,
    session_id_from_token,
)


class TestInMemorySessionStore:

    @pytest.mark.asyncio
    async def test_create_and_validate(self):
        store = InMemorySessionStore()
        token, session = await store.create_session(User(id="user_1", username="ada"))

        result = await store.validate_session_token(token)

        assert session.id == session_id_from_token(token)
        assert result.user.username == "ada"
        assert result.session.id == session.id

    @pytest.mark.asyncio
    async def test_unknown_token(self):
        result = await InMemorySessionStore().validate_session_token("nope")

        assert result == SessionValidation()

    @pytest.mark.asyncio
    async def test_expired_session_is_dropped(self):
        store = InMemorySessionStore()
        token, session = await store.create_session(User(id="user_1"))
        store.sessions[session.id] = session.model_copy(
            update={"expires_at": datetime.now(timezone.utc) - timedelta(seconds=1)}
        )

        result = await store.validate_session_token(token)

        assert result.session is None
        assert session.id not in store.sessions

    @pytest.mark.asyncio
    async def test_session_close_to_expiry_is_renewed(self):
        store = InMemorySessionStore()
        token, session = await store.create_session(User(id="user_1"))
        soon = datetime.now(timezone.utc) + RENEW_THRESHOLD - timedelta(days=1)
        store.sessions[session.id] = session.model_copy(update={"expires_at": soon})

        result = await store.validate_session_token(token)

        assert result.session.expires_at > soon + timedelta(days=1)

    @pytest.mark.asyncio
    async def test_invalidate(self):
        store = InMemorySessionStore()
        token, session = await store.create_session(User(id="user_1"))

        await store.invalidate_session(session.id)

        assert (await store.validate_session_token(token)).user is None


def make_app(validator) -> FastAPI:
    app = FastAPI()
    app.add_middleware(SessionAuthMiddleware, validator=validator)

    @app.get("/whoami")
    async def whoami(request: Request):
        user = request.state.user
        return {"user": user.id if user else None, "has_session": request.state.session is not None}

    @app.get("/boom")
    async def boom():
        raise RuntimeError("exploded")

    return app


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def token(session_store):
    token, _ = asyncio.run(session_store.create_session(User(id="user_1")))
    return token


def test_no_cookie_means_anonymous(session_store):
    client = TestClient(make_app(session_store))

    response = client.get("/whoami")

    assert response.json() == {"user": None, "has_session": False}
    assert "set-cookie" not in response.headers


def test_valid_cookie_sets_user_and_refreshes_cookie(session_store, token):
    client = TestClient(make_app(session_store))
    client.cookies.set("auth-session", token)

    response = client.get("/whoami")

    assert response.json() == {"user": "user_1", "has_session": True}
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"auth-session={token}")
    assert "HttpOnly" in set_cookie
    assert "expires=" in set_cookie.lower()


def test_invalid_cookie_is_deleted(session_store):
    client = TestClient(make_app(session_store))
    client.cookies.set("auth-session", "forged")

    response = client.get("/whoami")

    assert response.json() == {"user": None, "has_session": False}
    assert 'auth-session=""' in response.headers["set-cookie"]
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_unhandled_error_becomes_plain_500(session_store):
    client = TestClient(make_app(session_store), raise_server_exceptions=False)

    response = client.get("/boom")

    assert response.status_code == 500
    assert response.text == "Internal Server Error"


def test_validator_failure_becomes_plain_500():
    class BrokenValidator:
        async def validate_session_token(self, token):
            raise ConnectionError("session database down")

        async def invalidate_session(self, session_id):
            pass

    client = TestClient(make_app(BrokenValidator()))
    client.cookies.set("auth-session", "anything")

    response = client.get("/whoami")

    assert response.status_code == 500
    assert response.text == "Internal Server Error"
