import pytest
from httpx import AsyncClient

from volei.core.cache import SUMMARY

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


@pytest.mark.asyncio
async def test_health_is_public(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, admin) -> None:
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": ADMIN_EMAIL.upper(), "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    data = response.json()

    assert "access_token" in data
    assert "refresh_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == ADMIN_EMAIL
    assert data["user"]["role"] == "ADMIN"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, admin) -> None:
    response = await client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": "nope"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_oauth_form(client: AsyncClient, admin) -> None:
    response = await client.post(
        "/api/v1/auth/login-oauth",
        data={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_protected_routes_require_token(client: AsyncClient) -> None:
    response = await client.get("/api/v1/students")
    assert response.status_code == 401

    response = await client.get("/api/v1/students", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me(auth_client: AsyncClient) -> None:
    response = await auth_client.get("/api/v1/auth/me")
    assert response.status_code == 200
    assert response.json()["email"] == ADMIN_EMAIL


@pytest.mark.asyncio
async def test_refresh_consumes_token(client: AsyncClient, admin) -> None:
    login = await client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    refresh_token = login.json()["refresh_token"]

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
    assert response.status_code == 200
    assert response.json()["refresh_token"] != refresh_token

    again = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
    assert again.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_refresh_and_clears_cache(client: AsyncClient, app, admin) -> None:
    login = await client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    tokens = login.json()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    await client.get("/api/v1/dashboard/summary", headers=headers)
    assert app.state.query_cache.get(SUMMARY) is not None

    response = await client.post("/api/v1/auth/logout", headers=headers)
    assert response.status_code == 204
    assert len(app.state.query_cache) == 0

    refresh = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refresh.status_code == 401
