"""
CaseFamily Backend: Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    CaseFamilyError (base)
    ├── ValidationError   → 400 Bad Request (malformed id, missing field)
    ├── NotFoundError     → 404 Not Found (client or relation absent)
    └── StorageError      → 500 Internal Server Error (driver failure)
"""

from typing import Any, Dict, Optional


class CaseFamilyError(Exception):
    """
    Base exception for all CaseFamily application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info, logged and returned as details where
                  the handler chooses to
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CaseFamilyError):
    """
    Raised when client input fails validation.

    When:    Identifier is not a valid ObjectId, or a required field or
             query parameter is missing or empty.
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


class NotFoundError(CaseFamilyError):
    """
    Raised when a requested client or relation does not exist.

    HTTP:    404 Not Found

    The driver returns None (find_one) or a zero count (delete/update) for
    missing records; services convert those into this exception.
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


class StorageError(CaseFamilyError):
    """
    Raised when a document store operation fails unexpectedly.

    What:    A query or write against MongoDB raised a driver error
             (server unreachable, timeout, rejected operation).
    HTTP:    500 Internal Server Error

    The underlying driver message is kept in `reason` and surfaced to the
    caller under the `error` key. No retry is attempted.
    """

    def __init__(
        self,
        message: str = "A storage error occurred",
        reason: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.reason = reason
