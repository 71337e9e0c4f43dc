"""
Userbase Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the failure kinds the API reports.
Why:   Each kind maps to one HTTP status in main.py; routes and services never
       build error responses by hand.
How:   Each exception carries a message and optional context dict.
       Global exception handlers catch these and return structured JSON.
Who:   Raised by the unit of work (database errors) and UserService (lookups).
When:  During request processing.

Exception Hierarchy:
    UserbaseError (base)
    ├── ValidationError               → 400 Bad Request
    ├── NotFoundError                 → 404 Not Found
    ├── ConflictError                 → 409 Conflict
    ├── BackendUnavailableError       → 503 Service Unavailable
    └── DatabaseError                 → 500 Internal Server Error
        └── ReadOnlyTransactionError  → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class UserbaseError(Exception):
    """
    Base exception for all Userbase application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where noted)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = dict(context or {})
        super().__init__(self.message)


class ValidationError(UserbaseError):
    """
    Raised when client input is well-formed but inconsistent.

    When:    PUT /api/users/{id} with a body id that differs from the path id.
    HTTP:    400 Bad Request

    Schema-level problems (missing fields, wrong types) never reach this class;
    FastAPI answers those with its own 422 response.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(UserbaseError):
    """
    Raised when a requested resource does not exist.

    The repository returns None for missing rows; the service converts that
    None into this exception where the operation requires a record.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = dict(context or {})
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(UserbaseError):
    """
    Raised when a write collides with existing state.

    When:    POST /api/users with an id already in use, or any primary-key
             IntegrityError raised by the database (concurrent inserts).
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "The request conflicts with an existing resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(UserbaseError):
    """
    Raised when a database operation fails for a reason other than
    connectivity or a constraint.

    Security Note:
        The message returned to the client is always generic. The driver
        message (which may include SQL) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ReadOnlyTransactionError(DatabaseError):
    """Raised when a read-only unit of work tries to flush changes."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Write attempted inside a read-only unit of work",
            context=context,
        )


class BackendUnavailableError(UserbaseError):
    """
    Raised when the database cannot be reached.

    When:    Connection refused, DNS failure, database file unreadable,
             connection dropped mid-transaction.
    HTTP:    503 Service Unavailable

    Why separate from DatabaseError:
        A client listing users must be able to tell "no users" (200, [])
        from "the store is down" (503). The 503 also tells load balancers
        and retrying clients that the condition is temporary.
    """

    def __init__(
        self,
        message: str = "The database is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
