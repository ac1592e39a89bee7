"""
Tests for authentication: token helpers, guards, and /auth endpoints.
"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from config import settings
from domain.errors import UnauthorizedError
from middleware.auth import _parse_authorization, decode_access_token, issue_access_token


class TestTokens:

    @pytest.mark.unit
    def test_round_trip(self):
        token = issue_access_token(user_id=7, role="admin")
        payload = decode_access_token(token)
        assert payload["sub"] == "7"
        assert payload["role"] == "admin"
        assert payload["iss"] == settings.jwt_issuer

    @pytest.mark.unit
    def test_expired_token(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "iss": settings.jwt_issuer,
                "sub": "1",
                "role": "user",
                "iat": int((now - timedelta(hours=2)).timestamp()),
                "exp": int((now - timedelta(hours=1)).timestamp()),
            },
            settings.jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(UnauthorizedError) as exc_info:
            decode_access_token(token)
        assert "expired" in exc_info.value.message

    @pytest.mark.unit
    def test_wrong_secret(self):
        token = jwt.encode({"sub": "1"}, "some-other-secret", algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            decode_access_token(token)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def", "abc.def"),
            ("bearer abc.def", "abc.def"),
            ("abc.def", "abc.def"),
            ("Basic dXNlcjpwYXNz", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse_authorization(self, header, expected):
        assert _parse_authorization(header) == expected


class TestRegisterLogin:

    @pytest.mark.api
    async def test_register_then_login(self, client):
        resp = await client.post("/auth/register", json={
            "name": "Ada",
            "email": "Ada@Example.com",
            "password": "hunter22",
            "phone": "555-0199",
            "address": "2 Side St",
            "answer": "football",
        })
        assert resp.status_code == 201
        user = resp.json()["user"]
        assert user["email"] == "ada@example.com"
        assert user["role"] == "user"
        assert "password_hash" not in user

        resp = await client.post("/auth/login", json={"email": "ada@example.com", "password": "hunter22"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert decode_access_token(body["token"])["sub"] == str(user["id"])

    @pytest.mark.api
    async def test_duplicate_registration(self, client, shopper):
        resp = await client.post("/auth/register", json={
            "name": "Again",
            "email": shopper.email,
            "password": "whatever",
            "phone": "1",
            "address": "x",
            "answer": "y",
        })
        assert resp.status_code == 200
        assert resp.json()["success"] is False

    @pytest.mark.api
    async def test_register_missing_field_is_400(self, client):
        resp = await client.post("/auth/register", json={"name": "No Email"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"

    @pytest.mark.api
    async def test_login_wrong_password(self, client, shopper):
        resp = await client.post("/auth/login", json={"email": shopper.email, "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["success"] is False

    @pytest.mark.api
    async def test_login_unknown_email(self, client):
        resp = await client.post("/auth/login", json={"email": "nobody@example.com", "password": "x"})
        assert resp.status_code == 401

    @pytest.mark.api
    async def test_login_is_rate_limited(self, client, shopper):
        codes = []
        for _ in range(21):
            resp = await client.post("/auth/login", json={"email": shopper.email, "password": "nope"})
            codes.append(resp.status_code)
        assert codes[:20] == [401] * 20
        assert codes[20] == 429
        assert resp.headers["Retry-After"] == "60"


class TestPasswordAndProfile:

    @pytest.mark.api
    async def test_forgot_password(self, client, shopper):
        resp = await client.post("/auth/forgot-password", json={
            "email": shopper.email, "answer": "blue", "newPassword": "newpass99",
        })
        assert resp.status_code == 200
        resp = await client.post("/auth/login", json={"email": shopper.email, "password": "newpass99"})
        assert resp.status_code == 200

    @pytest.mark.api
    async def test_forgot_password_wrong_answer(self, client, shopper):
        resp = await client.post("/auth/forgot-password", json={
            "email": shopper.email, "answer": "red", "newPassword": "newpass99",
        })
        assert resp.status_code == 404

    @pytest.mark.api
    async def test_profile_update(self, client, shopper, shopper_headers):
        resp = await client.put("/auth/profile", json={"address": "9 New Rd"}, headers=shopper_headers)
        assert resp.status_code == 200
        updated = resp.json()["updatedUser"]
        assert updated["address"] == "9 New Rd"
        assert updated["phone"] == "555-0100"

    @pytest.mark.api
    async def test_profile_short_password(self, client, shopper_headers):
        resp = await client.put("/auth/profile", json={"password": "abc"}, headers=shopper_headers)
        assert resp.status_code == 400


class TestGuards:

    @pytest.mark.api
    async def test_user_auth(self, client, shopper_headers):
        resp = await client.get("/auth/user-auth", headers=shopper_headers)
        assert resp.json() == {"ok": True}

    @pytest.mark.api
    async def test_user_auth_without_token(self, client):
        resp = await client.get("/auth/user-auth")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    @pytest.mark.api
    async def test_admin_auth_for_shopper(self, client, shopper_headers):
        resp = await client.get("/auth/admin-auth", headers=shopper_headers)
        assert resp.status_code == 403

    @pytest.mark.api
    async def test_admin_auth_for_admin(self, client, admin_headers):
        resp = await client.get("/auth/admin-auth", headers=admin_headers)
        assert resp.json() == {"ok": True}

    @pytest.mark.api
    async def test_token_for_deleted_user(self, client):
        headers = {"Authorization": issue_access_token(user_id=31337, role="user")}
        resp = await client.get("/auth/user-auth", headers=headers)
        assert resp.status_code == 401
