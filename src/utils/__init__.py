"""Utility modules for the IPTV catalog."""

from utils.errors import (
    AuthenticationError,
    ErrorCategory,
    NotFoundError,
    ToolError,
    UserExistsError,
    classify_exception,
    generate_request_id,
)

__all__ = [
    "AuthenticationError",
    "ErrorCategory",
    "NotFoundError",
    "ToolError",
    "UserExistsError",
    "classify_exception",
    "generate_request_id",
]
