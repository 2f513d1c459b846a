"""
Tests for POST /users/login status codes and headers.
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from enums.lock_reason import LockReason
from middleware.rate_limit import InMemoryLoginRateLimiter
from services.auth import LoginService
from web.auth_router import get_session


def build_app(test_session, max_attempts: int = 10):
    from app import create_app

    app = create_app(login_service=LoginService(InMemoryLoginRateLimiter(max_attempts=max_attempts,
                                                                         window_seconds=900)),
                     with_lifespan=False)

    async def override_session():
        yield test_session

    app.dependency_overrides[get_session] = override_session
    return app


@pytest_asyncio.fixture
async def client(test_session):
    async with AsyncClient(transport=ASGITransport(app=build_app(test_session)), base_url="http://test") as c:
        yield c


class TestLoginEndpoint:

    @pytest.mark.asyncio
    async def test_login_ok(self, client, make_user):
        user = await make_user(password="secret123")
        response = await client.post("/users/login", json={"email": user.email, "password": "secret123"})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "allowed"
        assert body["user"]["email"] == user.email
        assert "password_hash" not in body["user"]

    @pytest.mark.asyncio
    async def test_wrong_password_is_401(self, client, make_user):
        user = await make_user(password="secret123")
        response = await client.post("/users/login", json={"email": user.email, "password": "nope"})
        assert response.status_code == 401
        assert response.json()["attempts_left"] == 4

    @pytest.mark.asyncio
    async def test_locked_account_is_423(self, client, make_user):
        user = await make_user(password="secret123", is_locked=True, locked_reason=LockReason.FAILED_LOGIN,
                               login_attempts=5, locked_at=datetime.now(),
                               lock_until=datetime.now() + timedelta(hours=2))
        response = await client.post("/users/login", json={"email": user.email, "password": "secret123"})
        assert response.status_code == 423
        assert response.json()["hours_left"] == 2

    @pytest.mark.asyncio
    async def test_rate_limited_is_429_with_retry_after(self, test_session, make_user):
        user = await make_user(password="secret123")
        app = build_app(test_session, max_attempts=1)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            await c.post("/users/login", json={"email": user.email, "password": "nope"})
            response = await c.post("/users/login", json={"email": user.email, "password": "secret123"})

        assert response.status_code == 429
        retry_after = int(response.headers["Retry-After"])
        assert 0 < retry_after <= 900
        assert response.json()["retry_after_sec"] == retry_after

    @pytest.mark.asyncio
    async def test_rate_limit_keyed_per_forwarded_ip(self, test_session, make_user):
        user = await make_user(password="secret123")
        app = build_app(test_session, max_attempts=1)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            first = await c.post("/users/login", json={"email": user.email, "password": "nope"},
                                 headers={"X-Forwarded-For": "198.51.100.1"})
            second = await c.post("/users/login", json={"email": user.email, "password": "nope"},
                                  headers={"X-Forwarded-For": "198.51.100.2"})

        assert first.status_code == 401
        assert second.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_field_is_422(self, client):
        response = await client.post("/users/login", json={"email": "a@example.com"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["x" * 73, "ư" * 40])
    async def test_password_over_72_bytes_is_422(self, client, password):
        response = await client.post("/users/login", json={"email": "a@example.com", "password": password})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_shop_exceptions_become_400(self, test_session):
        from exceptions.cart import EmptyCartException

        app = build_app(test_session)

        @app.get("/raise")
        async def raise_shop_exception():
            raise EmptyCartException(7)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            response = await c.get("/raise")

        assert response.status_code == 400
        assert response.json() == {"error": "EmptyCartException", "message": "Cart is empty for user 7",
                                   "details": {"user_id": 7}}
