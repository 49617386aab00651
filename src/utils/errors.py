"""Error handling utilities for the IPTV catalog.

Provides structured error types and utilities for consistent error handling
at the MCP tool boundary, with actionable recovery suggestions. Services
below that boundary report "not found" as None or an empty result and let
persistence errors propagate.
"""

import asyncio
import logging
import sqlite3
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import jwt
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors for appropriate handling."""

    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    DATABASE_ERROR = "database_error"
    TIMEOUT = "timeout"
    INTERNAL_ERROR = "internal_error"


@dataclass
class ToolError:
    """Structured error response for MCP tools."""

    category: ErrorCategory
    message: str
    request_id: str | None = None
    recovery: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to response dict."""
        result: dict[str, Any] = {
            "error": self.message,
            "error_category": self.category.value,
        }
        if self.request_id:
            result["request_id"] = self.request_id
        if self.recovery:
            result["recovery"] = self.recovery
        if self.details:
            result["details"] = self.details
        return result


# Recovery suggestions for different error types
RECOVERY_SUGGESTIONS = {
    ErrorCategory.NOT_FOUND: "Check the id. Use 'list_content' or 'list_channels' to see what exists.",
    ErrorCategory.INVALID_INPUT: "Check parameter values and try again.",
    ErrorCategory.UNAUTHORIZED: "Log in again to obtain a fresh token.",
    ErrorCategory.CONFLICT: "Choose a different username or email.",
    ErrorCategory.DATABASE_ERROR: "The catalog database is unavailable. Try again in a moment.",
    ErrorCategory.TIMEOUT: "The operation took too long. Try again with a smaller request.",
    ErrorCategory.INTERNAL_ERROR: "An unexpected error occurred. Please try again.",
}


def get_recovery_suggestion(category: ErrorCategory) -> str:
    """Get recovery suggestion for an error category."""
    return RECOVERY_SUGGESTIONS.get(category, "Please try again.")


class NotFoundError(Exception):
    """Raised at the tool boundary when a single requested entity is missing."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class UserExistsError(Exception):
    """Raised when registering a username or email that is already taken."""

    def __init__(self, message: str = "User with this username or email already exists"):
        super().__init__(message)


class AuthenticationError(Exception):
    """Raised when a token is missing, malformed, expired or otherwise invalid."""


def generate_request_id() -> str:
    """Generate a short unique request ID for tracing."""
    return str(uuid.uuid4())[:8]


def classify_exception(e: Exception) -> ToolError:
    """Classify an exception into a structured error.

    Args:
        e: The exception to classify

    Returns:
        ToolError with appropriate category and recovery suggestion
    """
    if isinstance(e, asyncio.TimeoutError):
        category = ErrorCategory.TIMEOUT
        message = "Operation timed out"
    elif isinstance(e, NotFoundError):
        category = ErrorCategory.NOT_FOUND
        message = str(e)
    elif isinstance(e, UserExistsError):
        category = ErrorCategory.CONFLICT
        message = str(e)
    elif isinstance(e, (AuthenticationError, jwt.InvalidTokenError)):
        category = ErrorCategory.UNAUTHORIZED
        message = str(e) or "Invalid token"
    elif isinstance(e, sqlite3.IntegrityError):
        category = ErrorCategory.CONFLICT
        message = f"Constraint violated: {e}"
    elif isinstance(e, sqlite3.Error):
        category = ErrorCategory.DATABASE_ERROR
        message = f"Database error: {e}"
    elif isinstance(e, (ValueError, KeyError, TypeError, ValidationError)):
        category = ErrorCategory.INVALID_INPUT
        message = str(e)
    elif isinstance(e, RuntimeError) and "not initialized" in str(e).lower():
        category = ErrorCategory.DATABASE_ERROR
        message = str(e)
    else:
        category = ErrorCategory.INTERNAL_ERROR
        message = f"Unexpected error: {e}"

    return ToolError(
        category=category,
        message=message,
        recovery=get_recovery_suggestion(category),
    )


# Default timeouts
DEFAULT_HANDLER_TIMEOUT = 15.0  # Total time for handler execution
