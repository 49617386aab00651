"""Data models for the IPTV catalog."""

from models.base import Entity, parse_datetime, utcnow
from models.catalog import CatalogItem, Channel, ContentType, EpgProgram
from models.user import User, UserPreference, UserRole
from models.viewing import ManifestInfo, StreamInfo, ViewingSession, WatchTimeSummary

__all__ = [
    "CatalogItem",
    "Channel",
    "ContentType",
    "Entity",
    "EpgProgram",
    "ManifestInfo",
    "StreamInfo",
    "User",
    "UserPreference",
    "UserRole",
    "ViewingSession",
    "WatchTimeSummary",
    "parse_datetime",
    "utcnow",
]
