"""
TaskBoard Backend — Authentication Service
============================================

What:  Account registration, credential checks and bearer-token handling.
How:   Passwords are hashed with PBKDF2-SHA256 and a per-user random salt.
       Tokens are HS256 JWTs (PyJWT) carrying the user id in `sub`.
Who:   Called by routes/auth.py (register, login) and middleware/auth.py
       (decode_token on every protected request).

Token claims:
    sub  user id (UUID string)
    iat  issued-at (UTC)
    exp  expiry, iat + settings.jwt_expire_minutes
"""

import base64
import hashlib
import hmac
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone

import jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
)
from app.models.user import User
from app.schemas.user import TokenResponse, UserResponse

logger = logging.getLogger(__name__)

PBKDF2_ALGORITHM = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 120_000


def hash_password(password: str) -> str:
    """Hash a password for storage as "pbkdf2_sha256$<iterations>$<salt>$<hash>"."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), PBKDF2_ITERATIONS
    )
    encoded = base64.b64encode(digest).decode("ascii")
    return f"{PBKDF2_ALGORITHM}${PBKDF2_ITERATIONS}${salt}${encoded}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a hash produced by hash_password()."""
    try:
        algorithm, iterations, salt, encoded = password_hash.split("$", 3)
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != PBKDF2_ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), rounds
    )
    return hmac.compare_digest(base64.b64encode(digest).decode("ascii"), encoded)


def create_access_token(user_id: uuid.UUID) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> uuid.UUID:
    """
    Verify a bearer token and return the user id it carries.

    Raises:
        AuthorizationError: bad signature, expired, or malformed claims (→ 403)
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
        return uuid.UUID(str(payload["sub"]))
    except jwt.ExpiredSignatureError as e:
        raise AuthorizationError(context={"reason": "expired"}) from e
    except (jwt.PyJWTError, ValueError) as e:
        raise AuthorizationError(context={"reason": type(e).__name__}) from e


class AuthService:
    """
    Registration and login.

    Error Handling:
        Duplicate emails become ConflictError (409), wrong credentials
        AuthenticationError (401), driver failures DatabaseError (500).
    """

    async def register(self, db: AsyncSession, email: str, password: str) -> UserResponse:
        try:
            existing = await db.execute(select(User.id).where(User.email == email))
            if existing.scalar_one_or_none() is not None:
                raise ConflictError(
                    message="Email is already registered",
                    context={"email": email},
                )

            user = User(
                id=uuid.uuid4(),
                email=email,
                password_hash=hash_password(password),
                created_at=datetime.now(timezone.utc),
            )
            db.add(user)
            await db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same email
            raise ConflictError(
                message="Email is already registered",
                context={"email": email},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", email, str(e))
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"reason": str(e)},
            ) from e

        logger.info("User registered: %s", user.id)
        return UserResponse(id=user.id, email=user.email, created_at=user.created_at)

    async def login(self, db: AsyncSession, email: str, password: str) -> TokenResponse:
        try:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e))
            raise DatabaseError(
                message="Could not verify credentials. Please try again.",
                context={"reason": str(e)},
            ) from e

        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt for %s", email)
            raise AuthenticationError(message="Invalid email or password")

        return TokenResponse(
            token=create_access_token(user.id),
            token_type="Bearer",
            expires_in=settings.jwt_expire_minutes * 60,
        )


auth_service = AuthService()
