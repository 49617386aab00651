"""Catalog models: on-demand content, live channels and EPG programs."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from models.base import Entity, utcnow


class ContentType(Enum):
    """Kinds of catalog items."""

    LIVE_TV = "LiveTV"
    VOD = "VOD"
    SERIES = "Series"
    MOVIE = "Movie"


@dataclass
class CatalogItem(Entity):
    """A playable catalog entry.

    `rating` is unscaled; recommendation ranking treats a missing rating as 0.
    """

    __table__ = "contents"
    _datetime_fields = ("release_date", "created_at", "updated_at")
    _enum_fields = {"type": ContentType}

    title: str = ""
    stream_url: str = ""
    type: ContentType = ContentType.VOD
    description: str | None = None
    thumbnail_url: str | None = None
    duration: int | None = None  # seconds
    release_date: datetime | None = None
    genre: str | None = None
    rating: float | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: int | None = None


@dataclass
class Channel(Entity):
    """A live channel in the lineup."""

    __table__ = "channels"
    _datetime_fields = ("created_at", "updated_at")
    _bool_fields = ("is_active",)

    name: str = ""
    stream_url: str = ""
    channel_number: int = 0
    logo_url: str | None = None
    category: str | None = None
    language: str | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: int | None = None


@dataclass
class EpgProgram(Entity):
    """A scheduled program on a channel."""

    __table__ = "epg_programs"
    _datetime_fields = ("start_time", "end_time", "created_at")

    channel_id: int = 0
    title: str = ""
    start_time: datetime = field(default_factory=utcnow)
    end_time: datetime = field(default_factory=utcnow)
    description: str | None = None
    category: str | None = None
    rating: str | None = None  # parental rating, e.g. "PG"
    created_at: datetime = field(default_factory=utcnow)
    id: int | None = None

    def is_airing(self, at: datetime) -> bool:
        """Whether the program is on air at the given time."""
        return self.start_time <= at <= self.end_time
