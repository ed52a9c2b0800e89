"""
TaskBoard Backend — Task Route Handlers
=========================================

What:  HTTP surface for task CRUD and image upload.
How:   Parses path/query/body input, delegates to TaskService and
       FileService, returns JSON. Every route requires a bearer token
       (router-level dependency on get_current_user_id).

Routes:
    POST   /api/tasks                create
    GET    /api/tasks                list (search, page, limit, sort, status)
    GET    /api/tasks/{task_id}      fetch
    PUT    /api/tasks/{task_id}      update
    DELETE /api/tasks/{task_id}      delete
    POST   /api/tasks/{task_id}/upload  attach image (multipart field "image")
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import TaskBoardError, ValidationError
from app.middleware.auth import get_current_user_id
from app.models.task import TaskStatus
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.task import (
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
    TaskUploadResponse,
)
from app.services.file_service import UPLOAD_FIELD, file_service
from app.services.task_service import MAX_PAGE, parse_task_id, task_service

logger = logging.getLogger(__name__)

AUTH_RESPONSES = {
    401: {"description": "Missing bearer token", "model": ErrorResponse},
    403: {"description": "Invalid or expired token", "model": ErrorResponse},
}

router = APIRouter(
    prefix="/api/tasks",
    tags=["Tasks"],
    dependencies=[Depends(get_current_user_id)],
    responses=AUTH_RESPONSES,
)


@router.post(
    "",
    status_code=201,
    response_model=TaskResponse,
    responses={
        400: {"description": "Validation failed", "model": ErrorResponse},
        500: {"description": "Internal server error", "model": ErrorResponse},
    },
    summary="Create a new task",
)
async def create_task(
    payload: TaskCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.create_task(db=db, user_id=user_id, data=payload)


@router.get(
    "",
    response_model=TaskListResponse,
    responses={
        400: {"description": "Invalid query parameters", "model": ErrorResponse},
        500: {"description": "Internal server error", "model": ErrorResponse},
    },
    summary="List the caller's tasks",
    description=(
        "Returns the authenticated user's tasks with offset pagination. "
        "`search` matches title or description (case-insensitive); `sort` takes "
        "createdAt, updatedAt, title or status, prefixed with '-' for descending."
    ),
)
async def list_tasks(
    search: Optional[str] = Query(default=None, description="Search term"),
    page: int = Query(default=1, ge=1, le=MAX_PAGE, description="Page number"),
    limit: int = Query(default=10, ge=1, le=100, description="Number of tasks per page"),
    sort: str = Query(default="createdAt", description="Sort field, '-' prefix for descending"),
    status: Optional[TaskStatus] = Query(default=None, description="Task status"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> TaskListResponse:
    return await task_service.list_tasks(
        db=db,
        user_id=user_id,
        search=search,
        page=page,
        limit=limit,
        sort=sort,
        status=status,
    )


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    responses={
        400: {"description": "Invalid task ID format", "model": ErrorResponse},
        404: {"description": "Task not found", "model": ErrorResponse},
    },
    summary="Fetch a task by ID",
)
async def get_task(
    task_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.get_task(db=db, user_id=user_id, task_id=parse_task_id(task_id))


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    responses={
        400: {"description": "Validation failed", "model": ErrorResponse},
        404: {"description": "Task not found", "model": ErrorResponse},
    },
    summary="Update a task",
)
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.update_task(
        db=db, user_id=user_id, task_id=parse_task_id(task_id), data=payload
    )


@router.delete(
    "/{task_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid task ID format", "model": ErrorResponse},
        404: {"description": "Task not found", "model": ErrorResponse},
    },
    summary="Delete a task",
)
async def delete_task(
    task_id: str,
    background_tasks: BackgroundTasks,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    image = await task_service.delete_task(db=db, user_id=user_id, task_id=parse_task_id(task_id))
    if image:
        background_tasks.add_task(file_service.cleanup_file, image)
    return MessageResponse(message="Task deleted successfully")


@router.post(
    "/{task_id}/upload",
    response_model=TaskUploadResponse,
    responses={
        400: {"description": "No file uploaded or file rejected", "model": ErrorResponse},
        404: {"description": "Task not found", "model": ErrorResponse},
        500: {"description": "Internal server error", "model": ErrorResponse},
    },
    summary="Upload an image for a task",
)
async def upload_task_image(
    task_id: str,
    background_tasks: BackgroundTasks,
    image: Optional[UploadFile] = File(default=None, description="Image file (png, jpg, jpeg, gif, webp)"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> TaskUploadResponse:
    """
    Store the uploaded file and point the task at it.

    Steps:
        1. Reject requests without a file (400)
        2. Confirm the caller owns the task (400 bad id / 404)
        3. Validate and write the file under the uploads directory
        4. Save "/uploads/<name>" on the task; remove the previous image
    On failure after step 3 the freshly written file is removed.
    """
    if image is None or not image.filename:
        raise ValidationError(message="No file uploaded", field=UPLOAD_FIELD)

    tid = parse_task_id(task_id)
    try:
        await task_service.get_task(db=db, user_id=user_id, task_id=tid)

        content = await image.read()
        logger.info(
            "Received upload for task %s: filename=%s, size=%d bytes",
            tid,
            image.filename,
            len(content),
        )
        absolute_path, public_path = await file_service.validate_and_store(
            filename=image.filename,
            content=content,
            content_length=image.size,
        )
    finally:
        await image.close()

    try:
        task, previous = await task_service.attach_image(
            db=db, user_id=user_id, task_id=tid, image_path=public_path
        )
    except TaskBoardError:
        await file_service.cleanup_file(absolute_path)
        raise

    if previous and previous != public_path:
        background_tasks.add_task(file_service.cleanup_file, previous)

    return TaskUploadResponse(message="Image uploaded successfully", task=task)
