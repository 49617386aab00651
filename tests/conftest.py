"""Pytest configuration and fixtures for IPTV catalog tests."""

import itertools
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import AppConfig, AuthSettings
from models import CatalogItem, Channel, ContentType, User, ViewingSession, utcnow
from persistence import Database, UnitOfWork

TEST_STREAM_URL = "https://cdn.example.com/live/index.m3u8"
TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


@pytest.fixture
async def database(tmp_path: Path) -> Database:
    """Create a test catalog database."""
    db = Database(tmp_path / "test_catalog.db")
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def uow(database: Database) -> UnitOfWork:
    return database.unit_of_work()


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def auth_settings() -> AuthSettings:
    return AuthSettings(
        secret_key=TEST_SECRET,
        issuer="IPTVPlayer",
        audience="IPTVPlayerClients",
        expiration_minutes=60,
    )


@pytest.fixture
def add_content(uow: UnitOfWork):
    """Factory persisting catalog items."""

    async def _add(**fields: Any) -> CatalogItem:
        values = {
            "title": "Untitled",
            "stream_url": TEST_STREAM_URL,
            "type": ContentType.VOD,
            **fields,
        }
        item = CatalogItem(**values)
        uow.contents.add(item)
        await uow.save_changes()
        return item

    return _add


@pytest.fixture
def add_channel(uow: UnitOfWork):
    """Factory persisting channels with increasing channel numbers."""
    numbers = itertools.count(1)

    async def _add(**fields: Any) -> Channel:
        number = next(numbers)
        values = {
            "name": f"Channel {number}",
            "stream_url": TEST_STREAM_URL,
            "channel_number": number,
            **fields,
        }
        channel = Channel(**values)
        uow.channels.add(channel)
        await uow.save_changes()
        return channel

    return _add


@pytest.fixture
def add_user(uow: UnitOfWork):
    """Factory persisting users with unique names."""
    counter = itertools.count(1)

    async def _add(**fields: Any) -> User:
        n = next(counter)
        values = {
            "username": f"user{n}",
            "email": f"user{n}@example.com",
            "password_hash": "not-a-real-hash",
            **fields,
        }
        user = User(**values)
        uow.users.add(user)
        await uow.save_changes()
        return user

    return _add


@pytest.fixture
def add_session(uow: UnitOfWork):
    """Factory persisting viewing sessions.

    `minutes_ago` sets the start time relative to now, so tests control
    ordering without sleeping.
    """

    async def _add(
        user_id: int = 1,
        content_id: int | None = None,
        channel_id: int | None = None,
        minutes_ago: int = 0,
        **fields: Any,
    ) -> ViewingSession:
        start: datetime = utcnow() - timedelta(minutes=minutes_ago)
        session = ViewingSession(
            user_id=user_id,
            content_id=content_id,
            channel_id=channel_id,
            start_time=start,
            **fields,
        )
        uow.viewing_sessions.add(session)
        await uow.save_changes()
        return session

    return _add
