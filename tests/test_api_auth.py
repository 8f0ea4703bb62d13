"""
Тесты аутентификации через HTTP.

Проверяем:
- register / login / refresh / logout
- 401 в едином формате ошибки с заголовком WWW-Authenticate
- Профиль и настройки пользователя, удаление аккаунта
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from src.core.security import create_access_token
from tests.conftest import DEFAULT_PASSWORD, register

API = "/api/v1"


# ============================================================================
# REGISTER / LOGIN
# ============================================================================


@pytest.mark.asyncio
async def test_register_returns_tokens_and_user(test_client: AsyncClient):
    data = await register(test_client, email="New.User@Example.com")

    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["expires_in"] == 30 * 60
    assert data["user"]["email"] == "new.user@example.com"
    assert "password_hash" not in data["user"]


@pytest.mark.asyncio
async def test_register_duplicate_email(test_client: AsyncClient):
    await register(test_client)

    response = await test_client.post(
        f"{API}/auth/register",
        json={
            "name": "Again",
            "email": "ANNA@example.com",
            "password": DEFAULT_PASSWORD,
            "confirm_password": DEFAULT_PASSWORD,
        },
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_register_password_mismatch(test_client: AsyncClient):
    response = await test_client.post(
        f"{API}/auth/register",
        json={
            "name": "Anna",
            "email": "anna@example.com",
            "password": "first-password",
            "confirm_password": "second-password",
        },
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Passwords do not match"


@pytest.mark.asyncio
async def test_register_invalid_email(test_client: AsyncClient):
    response = await test_client.post(
        f"{API}/auth/register",
        json={
            "name": "Anna",
            "email": "not-an-email",
            "password": DEFAULT_PASSWORD,
            "confirm_password": DEFAULT_PASSWORD,
        },
    )

    assert response.status_code == 422
    fields = [detail["field"] for detail in response.json()["error"]["details"]]
    assert "email" in fields


@pytest.mark.asyncio
async def test_login(test_client: AsyncClient):
    await register(test_client)

    ok = await test_client.post(
        f"{API}/auth/login", json={"email": "anna@example.com", "password": DEFAULT_PASSWORD}
    )
    wrong = await test_client.post(
        f"{API}/auth/login", json={"email": "anna@example.com", "password": "nope-nope"}
    )

    assert ok.status_code == 200
    assert ok.json()["user"]["name"] == "Anna"
    assert wrong.status_code == 401
    assert wrong.json()["error"]["message"] == "Invalid email or password"
    assert wrong.headers["WWW-Authenticate"] == "Bearer"


# ============================================================================
# TOKENS
# ============================================================================


@pytest.mark.asyncio
async def test_protected_endpoint_requires_token(test_client: AsyncClient):
    response = await test_client.get(f"{API}/tasks")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_expired_access_token_rejected(test_client: AsyncClient):
    data = await register(test_client)
    expired = create_access_token(data["user"]["id"], expires_delta=timedelta(minutes=-1))

    response = await test_client.get(
        f"{API}/tasks", headers={"Authorization": f"Bearer {expired}"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Token has expired"


@pytest.mark.asyncio
async def test_refresh_issues_new_pair(test_client: AsyncClient):
    data = await register(test_client)

    response = await test_client.post(
        f"{API}/auth/refresh", json={"refresh_token": data["refresh_token"]}
    )
    assert response.status_code == 200
    access = response.json()["access_token"]

    tasks = await test_client.get(f"{API}/tasks", headers={"Authorization": f"Bearer {access}"})
    assert tasks.status_code == 200


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(test_client: AsyncClient):
    data = await register(test_client)

    response = await test_client.post(
        f"{API}/auth/refresh", json={"refresh_token": data["access_token"]}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout(test_client: AsyncClient):
    response = await test_client.post(f"{API}/auth/logout")

    assert response.status_code == 200
    assert response.json() == {"message": "Logged out"}


# ============================================================================
# USERS
# ============================================================================


@pytest.mark.asyncio
async def test_profile_roundtrip(test_client: AsyncClient, auth_headers):
    response = await test_client.put(
        f"{API}/users/profile", headers=auth_headers, json={"name": "Anna K"}
    )
    assert response.status_code == 200

    profile = await test_client.get(f"{API}/users/profile", headers=auth_headers)
    assert profile.json()["name"] == "Anna K"
    assert profile.json()["email"] == "anna@example.com"


@pytest.mark.asyncio
async def test_settings_defaults_and_update(test_client: AsyncClient, auth_headers):
    defaults = await test_client.get(f"{API}/users/settings", headers=auth_headers)
    assert defaults.status_code == 200
    assert defaults.json()["theme"] == "auto"
    assert defaults.json()["notifications_enabled"] is True

    updated = await test_client.put(
        f"{API}/users/settings", headers=auth_headers, json={"theme": "dark"}
    )
    assert updated.json()["theme"] == "dark"
    assert updated.json()["timezone"] == "UTC"

    rejected = await test_client.put(
        f"{API}/users/settings", headers=auth_headers, json={"timezone": "Mars/Olympus"}
    )
    assert rejected.status_code == 400
    assert rejected.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_delete_account(test_client: AsyncClient, auth_headers):
    await test_client.post(f"{API}/tasks", headers=auth_headers, json={"title": "Mine"})

    response = await test_client.delete(f"{API}/users/account", headers=auth_headers)
    assert response.status_code == 204

    # Токен ещё подписан, но пользователя больше нет
    after = await test_client.get(f"{API}/users/profile", headers=auth_headers)
    assert after.status_code == 401
