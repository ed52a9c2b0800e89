"""
TaskBoard Backend — Task SQLAlchemy Model
===========================================

What:  ORM model representing the `tasks` table.
Who:   Used by TaskService for CRUD operations and by Alembic for schema management.

Lifecycle:
    1. Created by POST /api/tasks (owner = authenticated caller, status = Pending)
    2. Mutated by PUT /api/tasks/{id} (title/description/status)
       or POST /api/tasks/{id}/upload (image only)
    3. Removed by DELETE /api/tasks/{id} (hard delete)

Invariants:
    - user_id is NOT NULL: every task has exactly one owner
    - status is stored through a non-native Enum with string validation,
      so only the three TaskStatus values are accepted
    - title is trimmed and non-empty (enforced by schemas/task.py)

Query Patterns:
    - List caller's tasks: WHERE user_id = :uid ORDER BY created_at
      → idx_tasks_user_id / idx_tasks_created_at
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class TaskStatus(str, enum.Enum):
    """The three states a task can be in."""

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(Base):
    """A user-owned unit of work with title, description, status and optional image."""

    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    # values_callable stores "In Progress" rather than the member name
    status: Mapped[TaskStatus] = mapped_column(
        Enum(
            TaskStatus,
            name="task_status",
            native_enum=False,
            create_constraint=True,
            validate_strings=True,
            length=20,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=TaskStatus.PENDING,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Public path, e.g. /uploads/<uuid>.png
    image: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_tasks_user_id", "user_id"),
        Index("idx_tasks_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, status='{self.status.value}', user_id={self.user_id})>"
