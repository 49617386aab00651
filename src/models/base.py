"""Base entity model for the IPTV catalog."""

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 string; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_column_value(value: Any) -> Any:
    """Convert a Python value into its SQLite column representation."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


@dataclass
class Entity:
    """Base class for persisted entities.

    Subclasses declare their table name and which columns need conversion
    when loaded back from SQLite (timestamps, flags, enums).
    """

    __table__: ClassVar[str] = ""
    _datetime_fields: ClassVar[tuple[str, ...]] = ()
    _bool_fields: ClassVar[tuple[str, ...]] = ()
    _enum_fields: ClassVar[dict[str, type[Enum]]] = {}

    @classmethod
    def column_names(cls) -> list[str]:
        """Column names in declaration order, excluding the identity."""
        return [f.name for f in fields(cls) if f.name != "id"]

    @classmethod
    def from_row(cls, row: Any) -> "Entity":
        """Build an entity from a database row."""
        data = dict(row)
        for name in cls._datetime_fields:
            if data.get(name):
                data[name] = parse_datetime(data[name])
        for name in cls._bool_fields:
            data[name] = bool(data.get(name))
        for name, enum_cls in cls._enum_fields.items():
            if data.get(name) is not None:
                data[name] = enum_cls(data[name])
        return cls(**data)

    def to_row(self) -> dict[str, Any]:
        """Column values for INSERT/UPDATE, excluding the identity."""
        return {
            name: to_column_value(getattr(self, name))
            for name in self.column_names()
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        d: dict[str, Any] = {"id": getattr(self, "id", None)}
        for name in self.column_names():
            d[name] = to_column_value(getattr(self, name))
        for name in self._bool_fields:
            d[name] = bool(getattr(self, name))
        return d
