"""
TaskBoard Backend — Bearer Token Authentication
=================================================

What:  FastAPI dependency guarding every /api/tasks route.
How:   Reads "Authorization: Bearer <token>", verifies it with
       auth_service.decode_token(), and stores the user id on
       request.state.user_id before returning it to the handler.

Failure modes:
    - header missing / not a bearer credential → 401 (AuthenticationError)
    - token invalid, expired or malformed      → 403 (AuthorizationError)
"""

import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.exceptions import AuthenticationError
from app.services.auth_service import decode_token

# auto_error=False so a missing header reaches our own 401 handling
bearer_scheme = HTTPBearer(auto_error=False, description="JWT from POST /api/auth/login")


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> uuid.UUID:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError(message="Access token is missing")

    user_id = decode_token(credentials.credentials)
    request.state.user_id = user_id
    return user_id
