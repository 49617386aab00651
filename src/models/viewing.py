"""Viewing session model and analytics result records."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from models.base import Entity, utcnow


@dataclass
class ViewingSession(Entity):
    """One playback of a catalog item or channel by a user.

    `end_time` and `duration` are only set when the session is marked
    completed; `duration` is whole seconds between start and end.
    """

    __table__ = "viewing_sessions"
    _datetime_fields = ("start_time", "end_time", "created_at")
    _bool_fields = ("completed",)

    user_id: int = 0
    content_id: int | None = None
    channel_id: int | None = None
    start_time: datetime = field(default_factory=utcnow)
    end_time: datetime | None = None
    duration: int | None = None  # seconds
    progress: int | None = None  # seconds, resume position
    completed: bool = False
    device_info: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    id: int | None = None


@dataclass
class WatchTimeSummary:
    """Total completed watch time for a user."""

    user_id: int
    total_seconds: int

    @property
    def total_hours(self) -> float:
        return round(self.total_seconds / 3600, 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "total_seconds": self.total_seconds,
            "total_hours": self.total_hours,
        }


@dataclass
class StreamInfo:
    """Where to play a catalog item or channel."""

    stream_url: str
    content_type: str
    title: str
    content_id: int | None = None
    channel_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "stream_url": self.stream_url,
            "content_type": self.content_type,
            "title": self.title,
        }
        if self.content_id is not None:
            d["content_id"] = self.content_id
        if self.channel_id is not None:
            d["channel_id"] = self.channel_id
        return d


@dataclass
class ManifestInfo:
    """HLS manifest location."""

    manifest_url: str
    mime_type: str = "application/vnd.apple.mpegurl"

    def to_dict(self) -> dict[str, Any]:
        return {"manifest_url": self.manifest_url, "type": self.mime_type}
