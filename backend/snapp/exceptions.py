"""
SNApp Backend: Exception Hierarchy
====================================

What:  Application-specific exceptions, one per HTTP outcome.
How:   Each exception carries a user-safe `message` and a `context` dict that
       is logged but never returned verbatim for server-side failures.
       Handlers registered in main.py translate them into JSON responses.

Exception Hierarchy:
    SnappError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error

The pure helpers (header extraction, search snippets, selection state,
shortcut registry) never raise these; only services and routes do.
"""

from typing import Any, Dict, Optional


class SnappError(Exception):
    """
    Base exception for all SNApp application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SnappError):
    """
    Raised when client input breaks a business rule.

    Schema-level problems (wrong types, missing fields) are left to FastAPI,
    which answers 422. This covers rules the schema cannot express, such as
    a blank search query or an update that changes nothing.
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


class AuthenticationError(SnappError):
    """
    Raised when a request arrives without an authenticated user.

    The auth provider sits in front of this service and forwards the user id
    in the X-User-ID header; a missing or blank header ends up here.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SnappError):
    """
    Raised when a requested resource does not exist for the current user.

    Notes belonging to another user are reported the same way as missing
    ones, so ids cannot be discovered across accounts.
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
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(SnappError):
    """
    Raised when a database operation fails unexpectedly.

    The client always gets a generic message; the SQL error and its context
    are only logged.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(SnappError):
    """Raised when a client exceeds the sliding-window request limit."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
