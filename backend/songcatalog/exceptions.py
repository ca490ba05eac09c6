"""
SongCatalog Backend: Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the three failure classes the API
       distinguishes.
Why:   Each class maps to exactly one HTTP status code, so routes never need
       try/except blocks; global handlers in main.py translate them.
How:   Every exception carries a message and an optional context dict that is
       logged server-side.

Exception Hierarchy:
    SongCatalogError (base)
    ├── ValidationError   → 400 Bad Request (malformed or out-of-range input)
    ├── NotFoundError     → 404 Not Found (lookup matched zero rows)
    └── StorageError      → 500 Internal Server Error (connectivity, SQL failure)

The repository raises NotFoundError for row absence and StorageError for
everything the database driver complains about. Callers tell the two apart
by type, never by inspecting message text.
"""

from typing import Any, Dict, Optional


class SongCatalogError(Exception):
    """
    Base exception for all SongCatalog application errors.

    Attributes:
        message:  Human-readable error description (returned in API responses)
        context:  Additional debug info (logged alongside the message)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SongCatalogError):
    """
    Raised when client input fails validation before touching storage.

    HTTP: 400 Bad Request
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


class NotFoundError(SongCatalogError):
    """
    Raised when a lookup yields zero rows.

    HTTP: 404 Not Found

    SQLAlchemy returns None for a missing row; the repository turns that None
    into this exception so the service layer can propagate it unchanged.
    """

    def __init__(
        self,
        resource: str = "song",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class StorageError(SongCatalogError):
    """
    Raised when a database operation fails.

    HTTP: 500 Internal Server Error

    Carries the repository operation name and the underlying driver error.
    The driver exception is also chained (`raise ... from exc`) so the full
    traceback reaches the logs.
    """

    def __init__(
        self,
        operation: str,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{operation}: storage operation failed"
        if cause is not None:
            message = f"{operation}: {cause}"
        ctx = context or {}
        ctx["operation"] = operation
        if cause is not None:
            ctx["cause"] = type(cause).__name__
        super().__init__(message=message, context=ctx)
        self.operation = operation
        self.cause = cause
