"""
TaskBoard Backend — Task Service (Business Logic)
===================================================

What:  CRUD operations on tasks, scoped to the calling user.
How:   Builds SQLAlchemy queries, applies validated input, and converts
       ORM rows into TaskResponse objects.
Who:   Called by routes/tasks.py; the db session is injected per request.

Ownership:
    Every lookup filters on user_id. A task owned by someone else is
    indistinguishable from a missing one (NotFoundError → 404).

Error Handling:
    SQLAlchemy failures are wrapped in DatabaseError with the driver
    message in context["reason"]. Application errors propagate as-is.
"""

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.task import Task, TaskStatus
from app.schemas.task import (
    PaginationMeta,
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

# Keeps (page - 1) * limit inside a 64-bit OFFSET
MAX_PAGE = 1_000_000

# Public sort keys → columns. A leading "-" flips to descending.
SORTABLE_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "title": Task.title,
    "status": Task.status,
}


def parse_task_id(raw: str) -> uuid.UUID:
    """Parse a path id, raising ValidationError (400) when it is not a UUID."""
    try:
        return uuid.UUID(raw)
    except (ValueError, AttributeError, TypeError):
        raise ValidationError(
            message="Invalid task ID format",
            field="id",
            context={"value": raw},
        ) from None


def parse_sort(sort: str) -> Tuple[str, bool]:
    """
    Split "createdAt" / "-title" into (field, descending).

    Raises ValidationError for unknown fields.
    """
    sort = (sort or "createdAt").strip()
    descending = sort.startswith("-")
    field = sort.lstrip("-+")
    if field not in SORTABLE_FIELDS:
        raise ValidationError(
            message=(
                f"Invalid sort field '{field}'. "
                f"Allowed: {', '.join(SORTABLE_FIELDS)} (prefix with '-' for descending)"
            ),
            field="sort",
        )
    return field, descending


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        user_id=task.user_id,
        image=task.image,
        created_at=_as_utc(task.created_at),
        updated_at=_as_utc(task.updated_at),
    )


class TaskService:
    """
    Business logic layer for task operations.

    Responsibilities:
        - create_task(): insert a task owned by the caller
        - list_tasks(): search/filter/sort/paginate the caller's tasks
        - get_task() / update_task() / delete_task(): single-task operations
        - attach_image(): record an uploaded image path on a task
    """

    async def _get_owned(
        self, db: AsyncSession, user_id: uuid.UUID, task_id: uuid.UUID
    ) -> Task:
        result = await db.execute(
            select(Task).where(Task.id == task_id, Task.user_id == user_id)
        )
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFoundError(resource="task", resource_id=str(task_id))
        return task

    async def create_task(
        self, db: AsyncSession, user_id: uuid.UUID, data: TaskCreate
    ) -> TaskResponse:
        now = datetime.now(timezone.utc)
        task = Task(
            id=uuid.uuid4(),
            title=data.title,
            description=data.description,
            status=data.status or TaskStatus.PENDING,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(task)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating task for %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not create the task. Please try again.",
                context={"reason": str(e)},
            ) from e

        logger.info("Task created: %s (user=%s)", task.id, user_id)
        return to_response(task)

    async def list_tasks(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        sort: str = "createdAt",
        status: Optional[TaskStatus] = None,
    ) -> TaskListResponse:
        """
        List the caller's tasks with offset pagination.

        Filters:
            search: case-insensitive substring match on title or description
            status: exact status match
        Pagination:
            OFFSET (page - 1) * limit LIMIT limit;
            total_pages = ceil(total_items / limit)
        """
        if not 1 <= page <= MAX_PAGE:
            raise ValidationError(
                message=f"page must be between 1 and {MAX_PAGE}",
                field="page",
            )
        field, descending = parse_sort(sort)

        filters = [Task.user_id == user_id]
        if status is not None:
            filters.append(Task.status == status)
        if search and search.strip():
            pattern = f"%{_escape_like(search.strip())}%"
            filters.append(
                or_(
                    Task.title.ilike(pattern, escape="\\"),
                    Task.description.ilike(pattern, escape="\\"),
                )
            )

        column = SORTABLE_FIELDS[field]
        order = desc(column) if descending else asc(column)

        try:
            query = (
                select(Task)
                .where(*filters)
                .order_by(order, asc(Task.id))
                .offset((page - 1) * limit)
                .limit(limit)
            )
            result = await db.execute(query)
            tasks = list(result.scalars().all())

            count_result = await db.execute(
                select(func.count()).select_from(Task).where(*filters)
            )
            total_items = count_result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing tasks: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve tasks. Please try again.",
                context={"reason": str(e)},
            ) from e

        return TaskListResponse(
            tasks=[to_response(task) for task in tasks],
            pagination=PaginationMeta(
                current_page=page,
                total_pages=math.ceil(total_items / limit),
                total_items=total_items,
            ),
        )

    async def get_task(
        self, db: AsyncSession, user_id: uuid.UUID, task_id: uuid.UUID
    ) -> TaskResponse:
        try:
            task = await self._get_owned(db, user_id, task_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching task %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the task. Please try again.",
                context={"task_id": str(task_id), "reason": str(e)},
            ) from e
        return to_response(task)

    async def update_task(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        task_id: uuid.UUID,
        data: TaskUpdate,
    ) -> TaskResponse:
        """Write only the fields present in the request body."""
        changes = data.model_dump(exclude_unset=True)
        try:
            task = await self._get_owned(db, user_id, task_id)
            for name, value in changes.items():
                setattr(task, name, value)
            task.updated_at = datetime.now(timezone.utc)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating task %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not update the task. Please try again.",
                context={"task_id": str(task_id), "reason": str(e)},
            ) from e

        logger.info("Task updated: %s fields=%s", task_id, sorted(changes))
        return to_response(task)

    async def delete_task(
        self, db: AsyncSession, user_id: uuid.UUID, task_id: uuid.UUID
    ) -> Optional[str]:
        """
        Delete a task.

        Returns the task's image path (if any) so the caller can remove the file.
        """
        try:
            task = await self._get_owned(db, user_id, task_id)
            image = task.image
            await db.delete(task)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting task %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not delete the task. Please try again.",
                context={"task_id": str(task_id), "reason": str(e)},
            ) from e

        logger.info("Task deleted: %s", task_id)
        return image

    async def attach_image(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        task_id: uuid.UUID,
        image_path: str,
    ) -> Tuple[TaskResponse, Optional[str]]:
        """
        Point a task's image at a stored upload.

        Returns the updated task and the previous image path (if any).
        """
        try:
            task = await self._get_owned(db, user_id, task_id)
            previous = task.image
            task.image = image_path
            task.updated_at = datetime.now(timezone.utc)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error attaching image to %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not save the image on the task. Please try again.",
                context={"task_id": str(task_id), "reason": str(e)},
            ) from e

        return to_response(task), previous


task_service = TaskService()
