"""
TaskBoard Backend — Authentication Tests
==========================================

What:  Password hashing, token handling, register/login endpoints and
       the bearer-token guard on /api/tasks.

Test Strategy:
    ✅ hash_password / verify_password round trip and tamper resistance
    ✅ decode_token rejects bad signatures, expired and malformed tokens
    ✅ Register 201 / duplicate 409 / bad input 400
    ✅ Login 200 / wrong credentials 401
    ✅ Missing token 401, invalid or expired token 403
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.config import settings
from app.exceptions import AuthorizationError
from app.services.auth_service import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from conftest import TEST_PASSWORD


def make_token(sub, expires_in=timedelta(minutes=5), secret=None):
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {"sub": sub, "iat": now, "exp": now + expires_in},
        secret or settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


# ══════════════════════════════════════════════════════════════════════════
# Passwords & Tokens
# ══════════════════════════════════════════════════════════════════════════


class TestPasswordHashing:

    def test_round_trip(self):
        stored = hash_password("s3cret-pass")

        assert stored.startswith("pbkdf2_sha256$")
        assert "s3cret-pass" not in stored
        assert verify_password("s3cret-pass", stored)
        assert not verify_password("s3cret-Pass", stored)

    def test_same_password_gets_different_salts(self):
        assert hash_password("same") != hash_password("same")

    @pytest.mark.parametrize("stored", ["", "plain", "md5$1$salt$abc", "pbkdf2_sha256$x$s$h"])
    def test_malformed_hash_never_verifies(self, stored):
        assert not verify_password("anything", stored)


class TestTokens:

    def test_round_trip(self):
        user_id = uuid.uuid4()
        assert decode_token(create_access_token(user_id)) == user_id

    def test_expiry_follows_settings(self):
        token = create_access_token(uuid.uuid4())
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        assert claims["exp"] - claims["iat"] == settings.jwt_expire_minutes * 60

    def test_expired_token(self):
        token = make_token(str(uuid.uuid4()), expires_in=timedelta(minutes=-1))

        with pytest.raises(AuthorizationError) as exc_info:
            decode_token(token)
        assert exc_info.value.context["reason"] == "expired"

    def test_wrong_signature(self):
        with pytest.raises(AuthorizationError):
            decode_token(make_token(str(uuid.uuid4()), secret="someone-elses-secret"))

    def test_subject_must_be_a_user_id(self):
        with pytest.raises(AuthorizationError):
            decode_token(make_token("admin"))

    def test_garbage(self):
        with pytest.raises(AuthorizationError):
            decode_token("not.a.jwt")


# ══════════════════════════════════════════════════════════════════════════
# Endpoints
# ══════════════════════════════════════════════════════════════════════════


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_201(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={"email": "  Carol@Example.COM ", "password": TEST_PASSWORD},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "carol@example.com"
        assert uuid.UUID(body["id"])
        assert "createdAt" in body
        assert "password" not in body and "passwordHash" not in body

    @pytest.mark.asyncio
    async def test_duplicate_email_returns_409(self, test_client):
        body = {"email": "dup@example.com", "password": TEST_PASSWORD}
        assert (await test_client.post("/api/auth/register", json=body)).status_code == 201

        body["email"] = "DUP@example.com"
        response = await test_client.post("/api/auth/register", json=body)

        assert response.status_code == 409
        assert response.json()["message"] == "Email is already registered"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"email": "no-at-sign", "password": TEST_PASSWORD},
            {"email": "short@example.com", "password": "12345"},
            {"email": "missing@example.com"},
            {"email": "extra@example.com", "password": TEST_PASSWORD, "admin": True},
        ],
    )
    async def test_invalid_input_returns_400(self, test_client, body):
        response = await test_client.post("/api/auth/register", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_token(self, test_client):
        await test_client.post(
            "/api/auth/register", json={"email": "dan@example.com", "password": TEST_PASSWORD}
        )

        response = await test_client.post(
            "/api/auth/login", json={"email": "Dan@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["tokenType"] == "Bearer"
        assert body["expiresIn"] == settings.jwt_expire_minutes * 60
        assert decode_token(body["token"])

    @pytest.mark.asyncio
    async def test_wrong_password_returns_401(self, test_client):
        await test_client.post(
            "/api/auth/register", json={"email": "erin@example.com", "password": TEST_PASSWORD}
        )

        response = await test_client.post(
            "/api/auth/login", json={"email": "erin@example.com", "password": "wrong-pass"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_unknown_email_returns_401(self, test_client):
        response = await test_client.post(
            "/api/auth/login", json={"email": "nobody@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 401


class TestBearerGuard:

    @pytest.mark.asyncio
    async def test_missing_token_returns_401(self, test_client):
        response = await test_client.get("/api/tasks")

        assert response.status_code == 401
        assert response.json()["message"] == "Access token is missing"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_returns_401(self, test_client):
        response = await test_client.get(
            "/api/tasks", headers={"Authorization": "Basic dXNlcjpwYXNz"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_returns_403(self, test_client):
        response = await test_client.get(
            "/api/tasks", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_expired_token_returns_403(self, test_client):
        token = make_token(str(uuid.uuid4()), expires_in=timedelta(seconds=-30))

        response = await test_client.get(
            "/api/tasks", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_valid_token_is_accepted(self, test_client, auth_headers):
        response = await test_client.get("/api/tasks", headers=auth_headers)

        assert response.status_code == 200
