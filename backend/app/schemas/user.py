"""
TaskBoard Backend — Auth Request/Response Schemas
===================================================

What:  Pydantic models for POST /api/auth/register and POST /api/auth/login.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.task import CamelModel


class Credentials(BaseModel):
    """Email + password pair shared by register and login."""

    model_config = ConfigDict(extra="forbid")

    email: str = Field(max_length=255, description="Account email (case-insensitive)")
    password: str = Field(max_length=128, description="Plain-text password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or not domain:
            raise ValueError("A valid email address is required")
        return v


class RegisterRequest(Credentials):
    password: str = Field(min_length=6, max_length=128, description="At least 6 characters")


class LoginRequest(Credentials):
    pass


class UserResponse(CamelModel):
    id: uuid.UUID
    email: str
    created_at: datetime


class TokenResponse(CamelModel):
    token: str = Field(description="JWT to send as 'Authorization: Bearer <token>'")
    token_type: str = "Bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
