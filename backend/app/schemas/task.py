"""
TaskBoard Backend — Task Request/Response Schemas
===================================================

What:  Pydantic models defining the task API contract.
How:   FastAPI validates request bodies against TaskCreate/TaskUpdate and
       serializes responses through TaskResponse (camelCase on the wire).

Validation rules:
    - title: required, trimmed, never empty → "Title is required"
    - description: optional, trimmed
    - status: optional, one of Pending | In Progress | Completed (null rejected)
    - unknown keys are rejected
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.task import TaskStatus

TITLE_MAX_LENGTH = 255


class CamelModel(BaseModel):
    """Response base: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class TaskCreate(BaseModel):
    """Body of POST /api/tasks."""

    model_config = ConfigDict(extra="forbid")

    # validate_default so a missing title reaches the validator below
    title: Optional[str] = Field(
        default=None,
        validate_default=True,
        description="Short task title (required, trimmed)",
    )
    description: Optional[str] = Field(default=None, description="Free-form details")
    status: Optional[TaskStatus] = Field(
        default=None,
        description="Pending, In Progress or Completed",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Title is required")
        v = v.strip()
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
        return v

    @field_validator("status")
    @classmethod
    def reject_null_status(cls, v: Optional[TaskStatus]) -> TaskStatus:
        # only runs when the key is present; omitting it keeps the default
        if v is None:
            raise ValueError(
                "Status must be one of: " + ", ".join(s.value for s in TaskStatus)
            )
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class TaskUpdate(TaskCreate):
    """
    Body of PUT /api/tasks/{id}.

    Same rules as creation; only the keys present in the body are written.
    """


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TaskResponse(CamelModel):
    """Full representation of a task."""

    id: uuid.UUID = Field(description="Task identifier (UUID)")
    title: str
    description: Optional[str] = None
    status: TaskStatus
    user_id: uuid.UUID = Field(alias="user", description="Owning user id")
    image: Optional[str] = Field(default=None, description="Public image path under /uploads")
    created_at: datetime
    updated_at: datetime


class PaginationMeta(CamelModel):
    """
    Offset pagination state for GET /api/tasks.

    total_pages is ceil(total_items / limit); current_page echoes the request.
    """

    current_page: int
    total_pages: int
    total_items: int


class TaskListResponse(CamelModel):
    tasks: List[TaskResponse]
    pagination: PaginationMeta


class TaskUploadResponse(CamelModel):
    message: str = "Image uploaded successfully"
    task: TaskResponse
