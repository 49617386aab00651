"""Tests for the persistence layer."""

import asyncio
import itertools
import sqlite3
from datetime import timezone
from pathlib import Path

import pytest

from models import CatalogItem, Channel, ContentType, EpgProgram, User, UserRole, utcnow
from persistence import Database


class TestDatabase:
    """Tests for Database lifecycle."""

    @pytest.mark.asyncio
    async def test_initialize_creates_file(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "catalog.db"
        db = Database(db_path)
        await db.initialize()
        try:
            assert db_path.exists()
        finally:
            await db.close()

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, tmp_path: Path):
        db_path = tmp_path / "catalog.db"
        for _ in range(2):
            db = Database(db_path)
            await db.initialize()
            await db.close()

    def test_connection_before_initialize(self, tmp_path: Path):
        db = Database(tmp_path / "catalog.db")
        with pytest.raises(RuntimeError, match="not initialized"):
            db.connection

    @pytest.mark.asyncio
    async def test_units_of_work_are_independent(self, database):
        first = database.unit_of_work()
        second = database.unit_of_work()

        first.contents.add(CatalogItem(title="Staged", stream_url="u"))

        assert first.has_pending_changes
        assert not second.has_pending_changes


class TestRepository:
    """Tests for Repository reads and staged writes."""

    @pytest.mark.asyncio
    async def test_add_assigns_id(self, uow):
        item = CatalogItem(title="Pilot", stream_url="https://x/pilot.m3u8")
        uow.contents.add(item)

        assert item.id is None
        affected = await uow.save_changes()

        assert affected == 1
        assert item.id is not None

    @pytest.mark.asyncio
    async def test_round_trip_preserves_types(self, uow):
        released = utcnow().replace(microsecond=0)
        item = CatalogItem(
            title="Night Train",
            stream_url="https://x/train.m3u8",
            type=ContentType.MOVIE,
            duration=5400,
            release_date=released,
            genre="Thriller",
            rating=4.1,
        )
        uow.contents.add(item)
        await uow.save_changes()

        loaded = await uow.contents.get_by_id(item.id)

        assert loaded == item
        assert loaded.type is ContentType.MOVIE
        assert loaded.release_date.tzinfo == timezone.utc

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, uow):
        assert await uow.contents.get_by_id(999) is None

    @pytest.mark.asyncio
    async def test_find_by_column(self, add_content, uow):
        await add_content(title="A", genre="Drama")
        await add_content(title="B", genre="Comedy")
        await add_content(title="C", genre="Drama")

        dramas = await uow.contents.find(genre="Drama")

        assert [c.title for c in dramas] == ["A", "C"]

    @pytest.mark.asyncio
    async def test_find_none_matches_null(self, add_content, uow):
        await add_content(title="Tagged", genre="Drama")
        await add_content(title="Untagged")

        untagged = await uow.contents.find(genre=None)

        assert [c.title for c in untagged] == ["Untagged"]

    @pytest.mark.asyncio
    async def test_find_by_enum_and_bool(self, add_content, add_channel, uow):
        await add_content(title="Film", type=ContentType.MOVIE)
        await add_content(title="Show", type=ContentType.SERIES)
        await add_channel(name="On")
        await add_channel(name="Off", is_active=False)

        movies = await uow.contents.find(type=ContentType.MOVIE)
        active = await uow.channels.find(is_active=True)

        assert [c.title for c in movies] == ["Film"]
        assert [c.name for c in active] == ["On"]

    @pytest.mark.asyncio
    async def test_find_with_predicate(self, add_content, uow):
        await add_content(title="Low", rating=2.0)
        await add_content(title="High", rating=4.5)

        good = await uow.contents.find(lambda c: (c.rating or 0) > 3)

        assert [c.title for c in good] == ["High"]

    @pytest.mark.asyncio
    async def test_find_unknown_column(self, uow):
        with pytest.raises(ValueError, match="Unknown column"):
            await uow.contents.find(colour="red")

    @pytest.mark.asyncio
    async def test_first_or_default(self, add_content, uow):
        first = await add_content(title="First", genre="Drama")
        await add_content(title="Second", genre="Drama")

        assert (await uow.contents.first_or_default(genre="Drama")).id == first.id
        assert await uow.contents.first_or_default(genre="Western") is None

    @pytest.mark.asyncio
    async def test_get_all_in_id_order(self, add_content, uow):
        for title in ("one", "two", "three"):
            await add_content(title=title)

        items = await uow.contents.get_all()

        assert [c.title for c in items] == ["one", "two", "three"]

    @pytest.mark.asyncio
    async def test_update(self, add_content, uow):
        item = await add_content(title="Draft")
        item.title = "Final"
        uow.contents.update(item)

        assert await uow.save_changes() == 1
        assert (await uow.contents.get_by_id(item.id)).title == "Final"

    @pytest.mark.asyncio
    async def test_update_unsaved_entity(self, uow):
        uow.contents.update(CatalogItem(title="Ghost", stream_url="u"))
        with pytest.raises(ValueError, match="unsaved"):
            await uow.save_changes()

    @pytest.mark.asyncio
    async def test_remove(self, add_content, uow):
        item = await add_content(title="Doomed")
        uow.contents.remove(item)
        await uow.save_changes()

        assert await uow.contents.get_by_id(item.id) is None

    @pytest.mark.asyncio
    async def test_save_without_changes(self, uow):
        assert await uow.save_changes() == 0

    @pytest.mark.asyncio
    async def test_writes_not_visible_before_save(self, uow):
        uow.contents.add(CatalogItem(title="Pending", stream_url="u"))
        assert await uow.contents.get_all() == []

    @pytest.mark.asyncio
    async def test_failed_save_rolls_back(self, add_user, uow):
        await add_user(username="taken", email="taken@example.com")

        uow.contents.add(CatalogItem(title="Collateral", stream_url="u"))
        uow.users.add(User(username="taken", email="other@example.com", password_hash="x"))

        with pytest.raises(sqlite3.IntegrityError):
            await uow.save_changes()

        assert await uow.contents.get_all() == []
        assert not uow.has_pending_changes

    @pytest.mark.asyncio
    async def test_deleting_channel_cascades_to_programs(self, add_channel, uow):
        channel = await add_channel()
        uow.epg_programs.add(EpgProgram(channel_id=channel.id, title="News"))
        await uow.save_changes()

        uow.channels.remove(channel)
        await uow.save_changes()

        assert await uow.epg_programs.get_all() == []


class TestTransactions:
    """Tests for explicit transactions spanning several saves."""

    @pytest.mark.asyncio
    async def test_commit(self, uow):
        await uow.begin_transaction()
        assert uow.in_transaction

        user = User(username="alex", email="alex@example.com", password_hash="x",
                    role=UserRole.PREMIUM)
        uow.users.add(user)
        await uow.save_changes()
        assert user.id is not None

        uow.contents.add(CatalogItem(title="Linked", stream_url="u"))
        await uow.commit_transaction()

        assert not uow.in_transaction
        assert len(await uow.users.get_all()) == 1
        assert len(await uow.contents.get_all()) == 1

    @pytest.mark.asyncio
    async def test_rollback_discards_flushed_writes(self, uow):
        await uow.begin_transaction()
        uow.contents.add(CatalogItem(title="Flushed", stream_url="u"))
        await uow.save_changes()
        uow.contents.add(CatalogItem(title="Staged", stream_url="u"))

        await uow.rollback_transaction()

        assert not uow.in_transaction
        assert not uow.has_pending_changes
        assert await uow.contents.get_all() == []

    @pytest.mark.asyncio
    async def test_failed_commit_rolls_back(self, add_user, uow):
        await add_user(username="taken", email="taken@example.com")

        await uow.begin_transaction()
        uow.contents.add(CatalogItem(title="First write", stream_url="u"))
        await uow.save_changes()
        uow.users.add(User(username="taken", email="new@example.com", password_hash="x"))

        with pytest.raises(sqlite3.IntegrityError):
            await uow.commit_transaction()

        assert not uow.in_transaction
        assert await uow.contents.get_all() == []

    @pytest.mark.asyncio
    async def test_nested_begin_rejected(self, uow):
        await uow.begin_transaction()
        try:
            with pytest.raises(RuntimeError, match="already in progress"):
                await uow.begin_transaction()
        finally:
            await uow.rollback_transaction()

    @pytest.mark.asyncio
    async def test_lock_released_after_commit(self, database, uow):
        await uow.begin_transaction()
        await uow.commit_transaction()

        other = database.unit_of_work()
        other.contents.add(CatalogItem(title="After", stream_url="u"))
        assert await other.save_changes() == 1

    @pytest.mark.asyncio
    async def test_transaction_block_commits(self, uow):
        async with uow.transaction():
            uow.contents.add(CatalogItem(title="First", stream_url="u"))
            await uow.save_changes()
            uow.contents.add(CatalogItem(title="Second", stream_url="u"))

        assert not uow.in_transaction
        assert [c.title for c in await uow.contents.get_all()] == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_error_in_transaction_block_rolls_back(self, database, uow):
        with pytest.raises(ValueError, match="halfway"):
            async with uow.transaction():
                uow.contents.add(CatalogItem(title="Flushed", stream_url="u"))
                await uow.save_changes()
                raise ValueError("halfway")

        assert not uow.in_transaction
        assert not database.lock.locked()
        assert await uow.contents.get_all() == []

    @pytest.mark.asyncio
    async def test_cancelled_transaction_releases_lock(self, database, uow):
        never = asyncio.Event()

        with pytest.raises(TimeoutError):
            async with asyncio.timeout(0.1):
                async with uow.transaction():
                    uow.contents.add(CatalogItem(title="Flushed", stream_url="u"))
                    await uow.save_changes()
                    await never.wait()

        assert not database.lock.locked()
        other = database.unit_of_work()
        other.channels.add(Channel(name="After", stream_url="u", channel_number=1))
        assert await other.save_changes() == 1
        assert await other.contents.get_all() == []

    @pytest.mark.asyncio
    async def test_cancelled_save_leaves_no_rows_behind(self, database, uow, monkeypatch):
        """Rows inserted before a cancelled save never reach a later commit."""
        connection = database.connection
        execute = connection.execute
        inserts = itertools.count()

        def stalling_execute(sql, *args, **kwargs):
            if sql.startswith("INSERT INTO contents") and next(inserts) >= 1:
                return asyncio.sleep(3600)
            return execute(sql, *args, **kwargs)

        monkeypatch.setattr(connection, "execute", stalling_execute)

        uow.contents.add(CatalogItem(title="A", stream_url="u"))
        uow.contents.add(CatalogItem(title="B", stream_url="u"))
        with pytest.raises(TimeoutError):
            async with asyncio.timeout(0.1):
                await uow.save_changes()

        monkeypatch.undo()
        assert not database.lock.locked()

        other = database.unit_of_work()
        other.channels.add(Channel(name="Unrelated", stream_url="u", channel_number=1))
        await other.save_changes()

        assert await other.contents.get_all() == []
        assert len(await other.channels.get_all()) == 1
