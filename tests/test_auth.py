"""Tests for registration, login and the profile endpoints."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from esg_api.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from esg_api.models.core import User
from tests.conftest import SAMPLE_PASSWORD

pytestmark = pytest.mark.anyio


# ── Security helpers ─────────────────────────────────────────────────────────


def test_password_hash_round_trip():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_rejects_malformed_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_token_carries_subject():
    token = create_access_token("abc")
    assert decode_access_token(token)["sub"] == "abc"


# ── Register / login ─────────────────────────────────────────────────────────


async def test_register_returns_token_and_profile(client: AsyncClient):
    resp = await client.post(
        "/auth/register",
        json={"name": "Asha Rao", "email": "Asha@Example.com", "password": "secret1"},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["token"]
    assert data["user"]["email"] == "asha@example.com"
    assert data["user"]["name"] == "Asha Rao"
    assert "createdAt" in data["user"]

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "asha@example.com"


async def test_register_duplicate_email_conflicts(client: AsyncClient, sample_user: User):
    resp = await client.post(
        "/auth/register",
        json={"name": "Someone", "email": sample_user.email, "password": "secret1"},
    )
    assert resp.status_code == 409
    assert resp.json()["message"] == "User with this email already exists"


async def test_register_short_password_is_bad_request(client: AsyncClient):
    resp = await client.post(
        "/auth/register",
        json={"name": "Asha", "email": "a@example.com", "password": "123"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "bad_request"


async def test_login(client: AsyncClient, sample_user: User):
    resp = await client.post(
        "/auth/login",
        json={"email": sample_user.email, "password": SAMPLE_PASSWORD},
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == str(sample_user.id)


async def test_login_wrong_password(client: AsyncClient, sample_user: User):
    resp = await client.post(
        "/auth/login",
        json={"email": sample_user.email, "password": "not-the-password"},
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid email or password"


async def test_login_unknown_email(client: AsyncClient):
    resp = await client.post(
        "/auth/login",
        json={"email": "nobody@example.com", "password": "whatever"},
    )
    assert resp.status_code == 401


# ── Token handling ───────────────────────────────────────────────────────────


async def test_me_without_header_is_unauthorized(client: AsyncClient):
    resp = await client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


async def test_me_with_garbage_token(client: AsyncClient):
    resp = await client.get("/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401


async def test_me_with_expired_token(client: AsyncClient, sample_user: User):
    token = create_access_token(str(sample_user.id), expires_delta=timedelta(seconds=-10))
    resp = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


async def test_token_for_inactive_user(client: AsyncClient, db, sample_user: User, auth_headers):
    sample_user.is_active = False
    await db.commit()
    resp = await client.get("/auth/me", headers=auth_headers)
    assert resp.status_code == 401


# ── Profile ──────────────────────────────────────────────────────────────────


async def test_update_name(client: AsyncClient, auth_headers):
    resp = await client.put("/auth/profile", json={"name": "Asha R."}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Asha R."


async def test_change_password_requires_current(client: AsyncClient, auth_headers):
    resp = await client.put(
        "/auth/profile",
        json={"currentPassword": "wrong-one", "newPassword": "brand-new"},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Current password is incorrect"


async def test_change_password(client: AsyncClient, sample_user: User, auth_headers):
    resp = await client.put(
        "/auth/profile",
        json={"currentPassword": SAMPLE_PASSWORD, "newPassword": "brand-new"},
        headers=auth_headers,
    )
    assert resp.status_code == 200

    login = await client.post(
        "/auth/login", json={"email": sample_user.email, "password": "brand-new"}
    )
    assert login.status_code == 200


async def test_register_name_with_control_character_is_bad_request(client: AsyncClient):
    resp = await client.post(
        "/auth/register",
        json={"name": "Asha\x07", "email": "a@example.com", "password": "secret1"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "bad_request"
