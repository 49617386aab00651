"""User account and preference models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from models.base import Entity, utcnow


class UserRole(Enum):
    """Account roles."""

    USER = "User"
    PREMIUM = "Premium"
    ADMIN = "Admin"


@dataclass
class User(Entity):
    """A registered viewer."""

    __table__ = "users"
    _datetime_fields = ("created_at", "last_login_at")
    _bool_fields = ("is_active",)
    _enum_fields = {"role": UserRole}

    username: str = ""
    email: str = ""
    password_hash: str = ""
    full_name: str | None = None
    is_active: bool = True
    role: UserRole = UserRole.USER
    created_at: datetime = field(default_factory=utcnow)
    last_login_at: datetime | None = None
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, never exposing the password hash."""
        d = super().to_dict()
        d.pop("password_hash", None)
        return d


@dataclass
class UserPreference(Entity):
    """Playback and notification preferences for a user."""

    __table__ = "user_preferences"
    _datetime_fields = ("created_at", "updated_at")
    _bool_fields = ("enable_notifications", "auto_play_next", "subtitles_enabled")

    user_id: int = 0
    favorite_genres: str | None = None  # comma-separated
    favorite_channels: str | None = None  # comma-separated channel ids
    language: str | None = None
    enable_notifications: bool = True
    auto_play_next: bool = False
    preferred_quality: int | None = None  # 480, 720, 1080...
    subtitles_enabled: bool = False
    subtitle_language: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: int | None = None
