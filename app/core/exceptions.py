"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- A single mapping from error codes to HTTP status codes

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures (400)
    ├── AuthenticationError - Missing or invalid credentials (401)
    ├── PermissionDeniedError - Authorization failures (403)
    ├── NotFoundError - Resource not found (404)
    └── ConflictError - State conflicts such as duplicates (409)

Usage:
    from core.exceptions import NotFoundError

    raise NotFoundError("Message not found", error_code="MESSAGE_NOT_FOUND")

    # Services usually return ServiceResult.failure(...) instead; views
    # turn those into responses with status_for_error_code().

Note:
    api_exception_handler is installed as DRF's EXCEPTION_HANDLER. Anything
    that is neither a BaseApplicationError nor a DRF APIException is logged
    and rendered as a generic 500 without internal detail.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.views import set_rollback

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Group not found",
                "error_code": "GROUP_NOT_FOUND",
                "details": {"group_id": "..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for malformed or missing fields and contradictory arguments,
    e.g. a message addressed to both a chat and a group.
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST


class AuthenticationError(BaseApplicationError):
    """Raised when a credential is missing, malformed or rejected."""

    default_error_code: str = "NOT_AUTHENTICATED"
    status_code: int = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when user lacks permission for an operation.

    Use for:
    - Acting on a group or chat the user does not participate in
    - Reading or marking messages outside the user's conversations

    Note:
        For authentication failures (missing/invalid token), use
        AuthenticationError or DRF's AuthenticationFailed.
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = status.HTTP_403_FORBIDDEN


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Example:
        raise NotFoundError(
            f"User '{username}' not found",
            error_code="USER_NOT_FOUND",
            details={"username": username},
        )
    """

    default_error_code: str = "NOT_FOUND"
    status_code: int = status.HTTP_404_NOT_FOUND


class ConflictError(BaseApplicationError):
    """
    Raised when operation conflicts with current resource state.

    Use for:
    - Duplicate usernames
    - Friend requests to existing friends
    - Adding a group member twice
    """

    default_error_code: str = "CONFLICT"
    status_code: int = status.HTTP_409_CONFLICT


# Explicit codes first; anything else falls back to suffix matching below.
ERROR_CODE_STATUS: dict[str, int] = {
    "BAD_REQUEST": status.HTTP_400_BAD_REQUEST,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INVALID_DESTINATION": status.HTTP_400_BAD_REQUEST,
    "NOT_AUTHENTICATED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "PERMISSION_DENIED": status.HTTP_403_FORBIDDEN,
    "NOT_PARTICIPANT": status.HTTP_403_FORBIDDEN,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "ALREADY_FRIENDS": status.HTTP_409_CONFLICT,
    "ALREADY_MEMBER": status.HTTP_409_CONFLICT,
    "USERNAME_TAKEN": status.HTTP_409_CONFLICT,
    "NOT_MEMBER": status.HTTP_409_CONFLICT,
}


def status_for_error_code(error_code: str | None) -> int:
    """
    Map a service error code to its HTTP status.

    Codes ending in ``_NOT_FOUND`` map to 404 and ``ALREADY_*`` to 409.
    Unknown codes are treated as bad requests.
    """
    if not error_code:
        return status.HTTP_400_BAD_REQUEST
    if error_code in ERROR_CODE_STATUS:
        return ERROR_CODE_STATUS[error_code]
    if error_code.endswith("_NOT_FOUND"):
        return status.HTTP_404_NOT_FOUND
    if error_code.startswith("ALREADY_"):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def api_exception_handler(exc: Exception, context: dict) -> Response:
    """
    DRF exception handler rendering every failure as ``{error, error_code}``.

    - BaseApplicationError: its own status and body
    - DRF APIException (validation, auth, 404, ...): DRF's status, body
      reshaped so ``{"detail": ...}`` becomes ``{"error", "error_code"}``
      and field errors land under ``errors``
    - anything else: logged with traceback, generic 500
    """
    if isinstance(exc, BaseApplicationError):
        set_rollback()
        return Response(exc.to_dict(), status=exc.status_code)

    response = drf_exception_handler(exc, context)
    if response is not None:
        data = response.data
        if isinstance(data, dict) and set(data) == {"detail"}:
            detail = data["detail"]
            code = getattr(detail, "code", None) or "error"
            response.data = {"error": str(detail), "error_code": code.upper()}
        else:
            response.data = {
                "error": "Invalid request",
                "error_code": "VALIDATION_ERROR",
                "errors": data,
            }
        return response

    view = context.get("view")
    logger.error(
        f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}",
        exc_info=exc,
    )
    set_rollback()
    return Response(
        {"error": "Internal server error", "error_code": "INTERNAL_ERROR"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
