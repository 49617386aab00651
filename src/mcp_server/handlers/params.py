"""Argument coercion for tool handlers.

Bad arguments raise ValueError or KeyError, which the server reports as
invalid input.
"""

from datetime import datetime
from typing import Any

from models import parse_datetime


def require_int(args: dict[str, Any], name: str) -> int:
    if name not in args or args[name] is None:
        raise KeyError(f"Missing required parameter: {name}")
    return _as_int(args[name], name)


def optional_int(args: dict[str, Any], name: str, default: int | None = None) -> int | None:
    value = args.get(name)
    if value is None:
        return default
    return _as_int(value, name)


def require_str(args: dict[str, Any], name: str) -> str:
    value = args.get(name)
    if not isinstance(value, str) or not value:
        raise ValueError(f"Parameter '{name}' must be a non-empty string")
    return value


def optional_datetime(args: dict[str, Any], name: str) -> datetime | None:
    value = args.get(name)
    if value is None:
        return None
    return require_datetime(args, name)


def require_datetime(args: dict[str, Any], name: str) -> datetime:
    value = require_str(args, name)
    try:
        return parse_datetime(value)
    except ValueError as e:
        raise ValueError(f"Parameter '{name}' is not an ISO 8601 datetime: {value}") from e


def _as_int(value: Any, name: str) -> int:
    # bool is an int subclass
    if isinstance(value, bool):
        raise ValueError(f"Parameter '{name}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Parameter '{name}' must be an integer") from e


def optional_bool(args: dict[str, Any], name: str, default: bool = False) -> bool:
    value = args.get(name)
    if value is None:
        return default
    # Strings like "false" are truthy
    if not isinstance(value, bool):
        raise ValueError(f"Parameter '{name}' must be a boolean")
    return value
