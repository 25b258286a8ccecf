"""Tests for the dev backend: login, refresh rotation, protected listings."""
import pytest
from fastapi.testclient import TestClient

from dev_backend import tokens
from dev_backend.config import ADMIN_EMAIL, ADMIN_PASSWORD
from dev_backend.main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def _reset_tokens():
    tokens.reset()
    yield
    tokens.reset()


def _login() -> dict:
    r = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    return r.json()["data"]


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("service") == "dev_backend"


def test_login_returns_token_pair():
    data = _login()
    assert data["accessToken"]
    assert data["refreshToken"]


def test_login_wrong_password():
    r = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong"})
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_me_requires_token():
    assert client.get("/api/auth/me").status_code == 401


def test_me_with_token():
    data = _login()
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['accessToken']}"})
    assert r.status_code == 200
    assert r.json()["data"]["userId"] == "admin-1"


def test_expired_access_token_rejected():
    expired = tokens.issue_access_token("admin-1", expires_in=-10)
    r = client.get("/api/admin/users", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401


def test_refresh_rotates_token():
    data = _login()
    r = client.post("/api/auth/refresh", json={"refreshToken": data["refreshToken"]})
    assert r.status_code == 200
    new = r.json()["data"]
    assert new["refreshToken"] != data["refreshToken"]
    # Old refresh token is consumed
    again = client.post("/api/auth/refresh", json={"refreshToken": data["refreshToken"]})
    assert again.status_code == 401
    assert tokens.refresh_calls == 2


def test_refresh_missing_token():
    r = client.post("/api/auth/refresh", json={})
    assert r.status_code == 401


def test_users_paginated_and_filtered():
    data = _login()
    headers = {"Authorization": f"Bearer {data['accessToken']}"}
    r = client.get("/api/admin/users", params={"page": 2, "pageSize": 10}, headers=headers)
    assert r.status_code == 200
    page = r.json()["data"]
    assert page["page"] == 2
    assert page["total"] == 25
    assert page["totalPages"] == 3
    assert len(page["items"]) == 10
    empresas = client.get("/api/admin/users", params={"userType": "EMPRESA"}, headers=headers).json()["data"]
    assert all(u["userType"] == "EMPRESA" for u in empresas["items"])


def test_stats():
    data = _login()
    r = client.get("/api/admin/stats", headers={"Authorization": f"Bearer {data['accessToken']}"})
    assert r.status_code == 200
    assert r.json()["data"]["users"] == 25
