"""
TaskBoard Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    TaskBoardError (base)
    ├── ValidationError       → 400 Bad Request
    ├── AuthenticationError   → 401 Unauthorized
    ├── AuthorizationError    → 403 Forbidden
    ├── NotFoundError         → 404 Not Found
    ├── ConflictError         → 409 Conflict
    ├── FileStorageError      → 500 Internal Server Error
    └── DatabaseError         → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class TaskBoardError(Exception):
    """
    Base exception for all TaskBoard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TaskBoardError):
    """
    Raised when client input fails validation.

    When:    Missing title, bad status, malformed task ID, missing/invalid upload.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(TaskBoardError):
    """
    Raised when a request carries no usable credentials.

    When:    Authorization header missing, wrong scheme, or bad login.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Access token is missing",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(TaskBoardError):
    """
    Raised when presented credentials are rejected.

    When:    Token signature invalid, token expired, or claims malformed.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Invalid or expired token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(TaskBoardError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/tasks/{id} with an unknown id, or a task owned by
             another user (existence is not disclosed).
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(TaskBoardError):
    """
    Raised when a write collides with existing state.

    When:    Registering an email that is already taken.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(TaskBoardError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(TaskBoardError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, deadlock, etc.
    HTTP:    500 Internal Server Error

    The driver's own message travels in context["reason"]; the response
    includes it only when settings.expose_error_details is enabled.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
