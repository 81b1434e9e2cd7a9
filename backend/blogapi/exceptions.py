"""
Blog API Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for each failure the API can report.
Why:   Services raise these directly; global exception handlers (registered in
       main.py) translate each kind to exactly one HTTP status and render the
       uniform {code, message, data} envelope.
How:   Each exception carries a user-facing message and an optional context
       dict that is logged server-side but never returned to the client.

Exception Hierarchy:
    BlogAPIError (base)
    ├── ValidationError   → 400 Bad Request (empty keyword, empty required input)
    ├── NotFoundError     → 404 Not Found (missing target or parent row)
    ├── ConflictError     → 409 Conflict (duplicate unique key, e.g. email)
    ├── StorageError      → 500 Internal Server Error (any data-store failure)
    │   └── IntegrityViolationError (constraint rejected the write)
    └── ConversionError   → 500 Internal Server Error (row → schema mapping failed)

Nothing here is retried: the first error raised aborts the request.
"""

from typing import Any, Dict, Optional


class BlogAPIError(Exception):
    """
    Base exception for all Blog API application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogAPIError):
    """
    Raised when client input fails a business rule.

    When:    Empty or whitespace-only search keyword, empty required field.
    HTTP:    400 Bad Request

    Schema-level validation (wrong types, missing JSON fields) is reported by
    FastAPI's RequestValidationError, which is also mapped to 400.
    """

    status_code = 400

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


class NotFoundError(BlogAPIError):
    """
    Raised when a requested resource, or the parent of a resource being
    written, does not exist.

    HTTP:    404 Not Found

    The gateway returns None for missing rows; services convert None into
    this exception only where absence is an error for the caller.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        if resource_id is not None:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(BlogAPIError):
    """
    Raised when a write would violate a uniqueness rule.

    When:    Creating a user with an email that already exists, or updating
             a user's email to one owned by another user.
    HTTP:    409 Conflict
    """

    status_code = 409

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(BlogAPIError):
    """
    Raised when the data store fails (connectivity, constraint, syntax...).

    HTTP:    500 Internal Server Error

    Security Note:
        The response message is always generic. The original exception type
        and message go into `context` and are logged server-side only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IntegrityViolationError(StorageError):
    """
    A constraint rejected the write (unique key, foreign key, NOT NULL).

    Still a StorageError (500) unless a service recognises the violation,
    e.g. a duplicate email racing past the existence check becomes a
    ConflictError.
    """

    def __init__(
        self,
        message: str = "The write violated a database constraint.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConversionError(BlogAPIError):
    """
    Raised when a freshly written row cannot be mapped back to its typed
    response representation.

    HTTP:    500 Internal Server Error
    """

    status_code = 500

    def __init__(
        self,
        resource: str = "resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(message=f"Failed to convert {resource} model", context=ctx)
