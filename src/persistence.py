"""Catalog persistence using SQLite.

Entities are stored one table per type. Services work through a
`UnitOfWork`, which exposes a `Repository` per entity type and flushes
staged writes on `save_changes()`.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Generic, TypeVar

import aiosqlite

from models import (
    CatalogItem,
    Channel,
    Entity,
    EpgProgram,
    User,
    UserPreference,
    ViewingSession,
)
from models.base import to_column_value

logger = logging.getLogger(__name__)

# Default database path
DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "iptv" / "catalog.db"

E = TypeVar("E", bound=Entity)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS contents (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        stream_url TEXT NOT NULL,
        type TEXT NOT NULL,
        description TEXT,
        thumbnail_url TEXT,
        duration INTEGER,
        release_date TEXT,
        genre TEXT,
        rating REAL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_contents_genre ON contents(genre)",
    """
    CREATE TABLE IF NOT EXISTS channels (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        stream_url TEXT NOT NULL,
        channel_number INTEGER NOT NULL,
        logo_url TEXT,
        category TEXT,
        language TEXT,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS epg_programs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        channel_id INTEGER NOT NULL REFERENCES channels(id) ON DELETE CASCADE,
        title TEXT NOT NULL,
        start_time TEXT NOT NULL,
        end_time TEXT NOT NULL,
        description TEXT,
        category TEXT,
        rating TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_epg_channel ON epg_programs(channel_id, start_time)",
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        full_name TEXT,
        is_active INTEGER NOT NULL DEFAULT 1,
        role TEXT NOT NULL,
        created_at TEXT NOT NULL,
        last_login_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_preferences (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        favorite_genres TEXT,
        favorite_channels TEXT,
        language TEXT,
        enable_notifications INTEGER NOT NULL DEFAULT 1,
        auto_play_next INTEGER NOT NULL DEFAULT 0,
        preferred_quality INTEGER,
        subtitles_enabled INTEGER NOT NULL DEFAULT 0,
        subtitle_language TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_preferences_user ON user_preferences(user_id)",
    # Sessions keep no foreign keys: a session may reference an id that no
    # longer (or never did) resolve.
    """
    CREATE TABLE IF NOT EXISTS viewing_sessions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        content_id INTEGER,
        channel_id INTEGER,
        start_time TEXT NOT NULL,
        end_time TEXT,
        duration INTEGER,
        progress INTEGER,
        completed INTEGER NOT NULL DEFAULT 0,
        device_info TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_sessions_user ON viewing_sessions(user_id, start_time)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_content ON viewing_sessions(content_id)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_channel ON viewing_sessions(channel_id)",
]


class Database:
    """SQLite database holding the catalog, accounts and viewing history."""

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._db: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Open the connection and create tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._db = await aiosqlite.connect(str(self.db_path))
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA foreign_keys = ON")

        for statement in SCHEMA:
            await self._db.execute(statement)

        await self._db.commit()
        logger.info(f"Initialized catalog database at {self.db_path}")

    async def close(self) -> None:
        """Close the database connection."""
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def connection(self) -> aiosqlite.Connection:
        if not self._db:
            raise RuntimeError("Database not initialized")
        return self._db

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    def unit_of_work(self) -> "UnitOfWork":
        """Create a new unit of work bound to this database."""
        return UnitOfWork(self)


class Repository(Generic[E]):
    """Data access for one entity type.

    Reads go straight to the database. Writes are staged on the owning
    unit of work and only reach the database on `save_changes()`.
    """

    def __init__(self, uow: "UnitOfWork", entity_cls: type[E]):
        self._uow = uow
        self.entity_cls = entity_cls
        self.table = entity_cls.__table__
        self._columns = set(entity_cls.column_names()) | {"id"}

    async def get_by_id(self, entity_id: int) -> E | None:
        """Load an entity by id, or None if it does not exist."""
        rows = await self._uow.fetch(
            f"SELECT * FROM {self.table} WHERE id = ?", (entity_id,)
        )
        return self.entity_cls.from_row(rows[0]) if rows else None

    async def find(
        self,
        predicate: Callable[[E], bool] | None = None,
        **filters: Any,
    ) -> list[E]:
        """Find entities matching column equality filters and a predicate.

        Keyword filters are evaluated in SQL (`None` matches NULL); the
        optional predicate is applied to the loaded entities afterwards.
        """
        conditions = []
        params: list[Any] = []
        for column, value in filters.items():
            if column not in self._columns:
                raise ValueError(f"Unknown column '{column}' for {self.table}")
            if value is None:
                conditions.append(f"{column} IS NULL")
            else:
                conditions.append(f"{column} = ?")
                params.append(to_column_value(value))

        query = f"SELECT * FROM {self.table}"
        if conditions:
            query += f" WHERE {' AND '.join(conditions)}"
        query += " ORDER BY id"

        rows = await self._uow.fetch(query, params)
        entities = [self.entity_cls.from_row(row) for row in rows]
        if predicate is not None:
            entities = [e for e in entities if predicate(e)]
        return entities

    async def first_or_default(
        self,
        predicate: Callable[[E], bool] | None = None,
        **filters: Any,
    ) -> E | None:
        """First match in store order, or None."""
        matches = await self.find(predicate, **filters)
        return matches[0] if matches else None

    async def get_all(self) -> list[E]:
        """All entities in store order."""
        return await self.find()

    def add(self, entity: E) -> None:
        """Stage an insert. The id is assigned when changes are saved."""
        self._uow.stage("add", entity)

    def update(self, entity: E) -> None:
        """Stage an update of all columns."""
        self._uow.stage("update", entity)

    def remove(self, entity: E) -> None:
        """Stage a delete."""
        self._uow.stage("remove", entity)


class UnitOfWork:
    """A persistence boundary grouping entity writes.

    `save_changes()` flushes staged writes and commits them. Between
    `begin_transaction()` and `commit_transaction()` several
    `save_changes()` calls share one commit-or-rollback boundary.
    """

    def __init__(self, database: Database):
        self.database = database
        self._pending: list[tuple[str, Entity]] = []
        self._in_transaction = False

        self.contents: Repository[CatalogItem] = Repository(self, CatalogItem)
        self.channels: Repository[Channel] = Repository(self, Channel)
        self.epg_programs: Repository[EpgProgram] = Repository(self, EpgProgram)
        self.users: Repository[User] = Repository(self, User)
        self.viewing_sessions: Repository[ViewingSession] = Repository(
            self, ViewingSession
        )
        self.user_preferences: Repository[UserPreference] = Repository(
            self, UserPreference
        )

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._pending)

    def stage(self, operation: str, entity: Entity) -> None:
        self._pending.append((operation, entity))

    async def fetch(self, query: str, params: Any = ()) -> list[Any]:
        """Run a read query and return all rows."""
        db = self.database.connection
        if self._in_transaction:
            # The database lock is already held by this transaction
            async with db.execute(query, params) as cursor:
                return list(await cursor.fetchall())

        async with self.database.lock:
            async with db.execute(query, params) as cursor:
                return list(await cursor.fetchall())

    async def save_changes(self) -> int:
        """Flush staged writes. Returns the number of affected rows."""
        db = self.database.connection
        if not self._pending:
            return 0

        if self._in_transaction:
            return await self._flush(db)

        async with self.database.lock:
            try:
                affected = await self._flush(db)
                await db.commit()
            except BaseException:
                # Cancellation included; executed rows must not reach a later commit
                await _rollback(db)
                raise
        return affected

    async def _flush(self, db: aiosqlite.Connection) -> int:
        pending, self._pending = self._pending, []
        affected = 0

        for operation, entity in pending:
            table = entity.__table__
            entity_id = getattr(entity, "id", None)

            if operation == "add":
                row = entity.to_row()
                columns = ", ".join(row)
                placeholders = ", ".join("?" for _ in row)
                cursor = await db.execute(
                    f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                    list(row.values()),
                )
                entity.id = cursor.lastrowid
            elif operation == "update":
                if entity_id is None:
                    raise ValueError(f"Cannot update unsaved {type(entity).__name__}")
                row = entity.to_row()
                assignments = ", ".join(f"{column} = ?" for column in row)
                cursor = await db.execute(
                    f"UPDATE {table} SET {assignments} WHERE id = ?",
                    [*row.values(), entity_id],
                )
            elif operation == "remove":
                if entity_id is None:
                    continue
                cursor = await db.execute(
                    f"DELETE FROM {table} WHERE id = ?", (entity_id,)
                )
            else:
                raise ValueError(f"Unknown operation '{operation}'")

            affected += max(cursor.rowcount, 0)

        return affected

    async def begin_transaction(self) -> None:
        """Start a transaction spanning several `save_changes()` calls."""
        if self._in_transaction:
            raise RuntimeError("Transaction already in progress")
        await self.database.lock.acquire()
        self._in_transaction = True

    async def commit_transaction(self) -> None:
        """Flush remaining changes and commit; roll back on failure."""
        if not self._in_transaction:
            await self.save_changes()
            return

        db = self.database.connection
        try:
            await self._flush(db)
            await db.commit()
        except BaseException:
            await _rollback(db)
            raise
        finally:
            self._release()

    async def rollback_transaction(self) -> None:
        """Discard staged and flushed-but-uncommitted changes."""
        self._pending = []
        if not self._in_transaction:
            return

        try:
            await _rollback(self.database.connection)
        finally:
            self._release()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["UnitOfWork"]:
        """Run the block as one transaction.

        Commits when the block finishes. Any exception, cancellation
        included, rolls back and releases the database lock.
        """
        await self.begin_transaction()
        try:
            yield self
        except BaseException:
            await self.rollback_transaction()
            raise
        await self.commit_transaction()

    def _release(self) -> None:
        self._in_transaction = False
        self.database.lock.release()


async def _rollback(db: aiosqlite.Connection) -> None:
    # Runs to completion even if cancelled again; aiosqlite queues it
    # behind any statement still in flight
    await asyncio.shield(db.rollback())


# Global instance
_database: Database | None = None


async def get_database(db_path: Path | str | None = None) -> Database:
    """Get or create the global database instance."""
    global _database

    if _database is None:
        _database = Database(db_path)
        await _database.initialize()

    return _database


async def close_database() -> None:
    """Close the global database."""
    global _database

    if _database:
        await _database.close()
        _database = None
