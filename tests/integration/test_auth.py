"""Integration tests: Auth endpoints."""

import pytest
from httpx import AsyncClient

from app.config import settings

PASSWORD = "SchoolPass123!"


@pytest.mark.asyncio
async def test_login_success_sets_cookie(async_client: AsyncClient, school):
    resp = await async_client.post(
        "/auth/login",
        json={"email": "Teacher@School.example.com", "password": PASSWORD},
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["token_type"] == "bearer"
    assert data["role"] == "teacher"
    assert data["user_id"] == str(school.teacher.id)
    assert resp.cookies.get(settings.SESSION_COOKIE_NAME) == data["access_token"]
    assert "httponly" in resp.headers["set-cookie"].lower()


@pytest.mark.asyncio
async def test_cookie_session_then_logout(async_client: AsyncClient, school):
    resp = await async_client.post(
        "/auth/login",
        json={"email": "parent@school.example.com", "password": PASSWORD},
    )
    assert resp.status_code == 200

    # no Authorization header: the cookie alone authenticates
    resp = await async_client.get("/auth/me")
    assert resp.status_code == 200
    me = resp.json()["data"]
    assert me["id"] == str(school.parent.id)
    assert me["role"] == "parent"
    assert me["full_name"] == "Maria Lopez"

    resp = await async_client.post("/auth/logout")
    assert resp.status_code == 200

    resp = await async_client.get("/auth/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, school):
    resp = await async_client.post(
        "/auth/login",
        json={"email": "teacher@school.example.com", "password": "wrong-password"},
    )
    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "UNAUTHENTICATED"
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_login_invalid_email(async_client: AsyncClient):
    resp = await async_client.post("/auth/login", json={"email": "not-an-email", "password": "x"})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_inactive_user_cannot_log_in_or_use_token(async_client: AsyncClient, school, auth_headers, db_session):
    from app.services.user_service import UserService

    headers = auth_headers(school.other_parent)
    user = await UserService.get_user_by_id(db_session, school.other_parent.id)
    user.is_active = False
    await db_session.commit()

    resp = await async_client.post(
        "/auth/login",
        json={"email": "parent2@school.example.com", "password": PASSWORD},
    )
    assert resp.status_code == 401

    resp = await async_client.get("/auth/me", headers=headers)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_role_claim_must_match_user(async_client: AsyncClient, school):
    from app.core.security import create_access_token

    token = create_access_token(data={"sub": str(school.students_9a[0].id), "role": "admin"})
    resp = await async_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_tampered_token(async_client: AsyncClient, school, auth_headers):
    token = auth_headers(school.admin)["Authorization"].split(" ", 1)[1]
    tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")
    resp = await async_client.get("/auth/me", headers={"Authorization": f"Bearer {tampered}"})
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "UNAUTHENTICATED"
