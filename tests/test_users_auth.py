"""
Auth and account tests — login, token refresh, role landing pages,
employee creation by an admin and the self-service profile.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from fupa.core.security import (ACCESS, REFRESH, create_access_token,
                                create_refresh_token, decode_token,
                                hash_password, verify_password)

API = "/api/v1"


# ── Credentials ─────────────────────────────────────────────────────
def test_password_hashing():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


def test_token_types_are_not_interchangeable():
    access = create_access_token("u1", "employee")
    refresh = create_refresh_token("u1")

    claims = decode_token(access, ACCESS)
    assert claims["sub"] == "u1"
    assert claims["role"] == "employee"
    assert decode_token(access, REFRESH) is None
    assert decode_token(refresh, ACCESS) is None
    assert decode_token(refresh, REFRESH)["sub"] == "u1"


def test_expired_token_is_rejected():
    token = create_access_token("u1", "employee", expires_delta=timedelta(seconds=-1))
    assert decode_token(token, ACCESS) is None
    assert decode_token("not-a-jwt", ACCESS) is None


# ── Login / session ─────────────────────────────────────────────────
async def _login(client: AsyncClient, email: str, password: str = "secret123"):
    return await client.post(f"{API}/auth/login", data={"username": email, "password": password})


@pytest.mark.asyncio
async def test_login_and_me(async_client: AsyncClient, employee):
    resp = await _login(async_client, "Budi@FUPA.test ")
    assert resp.status_code == 200
    token = resp.json()["access_token"]
    assert resp.json()["token_type"] == "bearer"

    me = await async_client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["uid"] == employee.uid
    assert me.json()["home"] == "/karyawan.html"


@pytest.mark.asyncio
async def test_admin_lands_on_admin_page(async_client: AsyncClient, admin_headers):
    me = await async_client.get(f"{API}/auth/me", headers=admin_headers)
    assert me.json()["role"] == "admin"
    assert me.json()["home"] == "/admin.html"


@pytest.mark.asyncio
async def test_login_sets_session_cookie(async_client: AsyncClient, employee):
    await _login(async_client, "budi@fupa.test")
    me = await async_client.get(f"{API}/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "budi@fupa.test"


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, employee):
    resp = await _login(async_client, "budi@fupa.test", "nope")
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Incorrect email or password", "success": False}


@pytest.mark.asyncio
async def test_login_inactive_user(async_client: AsyncClient, make_user):
    await make_user(email="gone@fupa.test", is_active=False)
    resp = await _login(async_client, "gone@fupa.test")
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_refresh_from_body(async_client: AsyncClient, employee):
    resp = await async_client.post(
        f"{API}/auth/refresh", json={"refresh_token": create_refresh_token(employee.uid)}
    )
    assert resp.status_code == 200
    assert decode_token(resp.json()["access_token"], ACCESS)["sub"] == employee.uid


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(async_client: AsyncClient, employee):
    resp = await async_client.post(
        f"{API}/auth/refresh", json={"refresh_token": create_access_token(employee.uid, "employee")}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_refresh_without_token(async_client: AsyncClient):
    resp = await async_client.post(f"{API}/auth/refresh")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_logout_clears_cookies(async_client: AsyncClient, employee):
    await _login(async_client, "budi@fupa.test")
    resp = await async_client.post(f"{API}/auth/logout")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logged out"}

    me = await async_client.get(f"{API}/auth/me")
    assert me.status_code == 401


@pytest.mark.asyncio
async def test_bad_bearer_token(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


# ── Employees ───────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_admin_creates_employee(async_client: AsyncClient, admin_headers):
    resp = await async_client.post(
        f"{API}/users/employees",
        json={"email": " Siti@FUPA.test", "password": "rahasia1"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    uid = resp.json()["uid"]

    login = await _login(async_client, "siti@fupa.test", "rahasia1")
    assert login.status_code == 200
    me = await async_client.get(
        f"{API}/auth/me", headers={"Authorization": f"Bearer {login.json()['access_token']}"}
    )
    assert me.json()["uid"] == uid
    assert me.json()["name"] == "siti"
    assert me.json()["role"] == "employee"


@pytest.mark.asyncio
async def test_create_employee_does_not_switch_admin_session(async_client: AsyncClient, admin):
    login = await _login(async_client, "admin@fupa.test")
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
    await async_client.post(
        f"{API}/users/employees", json={"email": "dewi@fupa.test", "password": "rahasia1"}, headers=headers
    )

    me = await async_client.get(f"{API}/auth/me")
    assert me.json()["uid"] == admin.uid


@pytest.mark.asyncio
async def test_duplicate_employee_email(async_client: AsyncClient, admin_headers, employee):
    resp = await async_client.post(
        f"{API}/users/employees",
        json={"email": "budi@fupa.test", "password": "rahasia1"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"email": "no-at-sign", "password": "rahasia1"},
        {"email": "x@fupa.test", "password": "short"},
        {"email": "x@fupa.test", "password": "rahasia1", "role": "owner"},
    ],
)
async def test_create_employee_validation(async_client: AsyncClient, admin_headers, body):
    resp = await async_client.post(f"{API}/users/employees", json=body, headers=admin_headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_employee_cannot_create_accounts(async_client: AsyncClient, employee_headers):
    resp = await async_client.post(
        f"{API}/users/employees",
        json={"email": "x@fupa.test", "password": "rahasia1"},
        headers=employee_headers,
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_list_users_by_role(async_client: AsyncClient, admin_headers, employee):
    resp = await async_client.get(f"{API}/users", params={"role": "employee"}, headers=admin_headers)
    assert [u["uid"] for u in resp.json()] == [employee.uid]


# ── Profile ─────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_profile_update_merges(async_client: AsyncClient, employee_headers):
    first = await async_client.put(
        f"{API}/profile/me",
        json={"name": "Budi Santoso", "address": "Jl. Merdeka 1"},
        headers=employee_headers,
    )
    assert first.status_code == 200

    second = await async_client.put(
        f"{API}/profile/me",
        json={"photo_url": "https://res.cloudinary.com/fupa-snack/image/upload/budi.jpg"},
        headers=employee_headers,
    )
    data = second.json()
    assert data["name"] == "Budi Santoso"
    assert data["address"] == "Jl. Merdeka 1"
    assert data["photo_url"].endswith("budi.jpg")

    loaded = await async_client.get(f"{API}/profile/me", headers=employee_headers)
    assert loaded.json() == data


@pytest.mark.asyncio
async def test_profile_rejects_blank_name(async_client: AsyncClient, employee_headers):
    resp = await async_client.put(f"{API}/profile/me", json={"name": "  "}, headers=employee_headers)
    assert resp.status_code == 422
