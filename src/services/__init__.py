"""Catalog, guide, account and streaming services.

Each service works through a `persistence.UnitOfWork`.
"""

from services.auth import AuthService
from services.catalog import ContentService
from services.epg import EpgService
from services.streaming import StreamingService

__all__ = [
    "AuthService",
    "ContentService",
    "EpgService",
    "StreamingService",
]
