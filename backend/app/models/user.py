"""
TaskBoard Backend — User SQLAlchemy Model
===========================================

What:  ORM model representing the `users` table.
Who:   Used by AuthService for registration and login; referenced by Task.

Table Design:
    - UUID primary key: also used as the JWT `sub` claim
    - email: unique, stored lower-cased so lookups are case-insensitive
    - password_hash: "pbkdf2_sha256$<iterations>$<salt>$<hash>" (see services/auth_service.py)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """A registered account that owns tasks."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
