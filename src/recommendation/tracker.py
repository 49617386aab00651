"""Viewing tracker for catalog playback.

Records when a user starts playing a catalog item or channel, follows
progress until completion, and answers history, "continue watching" and
popularity questions from the recorded sessions.
"""

import logging
from collections import Counter

from models import CatalogItem, ViewingSession, utcnow
from persistence import UnitOfWork
from recommendation.affinity import distinct_ids

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50
DEFAULT_TOP_LIMIT = 10

# Maximum items offered for "continue watching"
CONTINUE_WATCHING_LIMIT = 10


class ViewingTracker:
    """Records and queries per-user watch activity.

    Lookups return None or empty results for unknown ids. Session writes
    propagate persistence errors to the caller.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def start_session(
        self,
        user_id: int,
        content_id: int | None = None,
        channel_id: int | None = None,
        device_info: str | None = None,
    ) -> ViewingSession:
        """Record the start of playback and return the persisted session."""
        now = utcnow()
        session = ViewingSession(
            user_id=user_id,
            content_id=content_id,
            channel_id=channel_id,
            start_time=now,
            completed=False,
            device_info=device_info,
            created_at=now,
        )

        self.uow.viewing_sessions.add(session)
        await self.uow.save_changes()

        logger.debug(
            f"Started viewing session {session.id} for user {user_id} "
            f"(content={content_id}, channel={channel_id})"
        )
        return session

    async def update_progress(
        self, session_id: int, progress: int, completed: bool
    ) -> None:
        """Update the resume position and completion of a session.

        Unknown session ids are ignored. Marking a session completed stamps
        `end_time` with the current time and derives `duration`; doing so
        again recomputes both against the new time.
        """
        session = await self.uow.viewing_sessions.get_by_id(session_id)
        if session is None:
            logger.debug(f"Viewing session {session_id} not found, ignoring update")
            return

        session.progress = progress
        session.completed = completed
        if completed:
            session.end_time = utcnow()
            session.duration = round(
                (session.end_time - session.start_time).total_seconds()
            )

        self.uow.viewing_sessions.update(session)
        await self.uow.save_changes()

        if completed:
            logger.debug(
                f"Completed viewing session {session_id} after {session.duration}s"
            )

    async def get_history(
        self, user_id: int, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[ViewingSession]:
        """A user's sessions, most recent first."""
        sessions = await self.uow.viewing_sessions.find(user_id=user_id)
        sessions.sort(key=lambda s: s.start_time, reverse=True)
        return sessions[:max(limit, 0)]

    async def get_last_session_for_content(
        self, user_id: int, content_id: int
    ) -> ViewingSession | None:
        """The user's most recently started session for a catalog item."""
        sessions = await self.uow.viewing_sessions.find(
            user_id=user_id, content_id=content_id
        )
        if not sessions:
            return None
        return max(sessions, key=lambda s: s.start_time)

    async def get_genre_breakdown(self, user_id: int) -> dict[str, int]:
        """Count of distinct watched items per genre.

        Each distinct catalog item counts once however often it was watched;
        items without a genre are left out.
        """
        sessions = await self.uow.viewing_sessions.find(user_id=user_id)

        stats: dict[str, int] = {}
        for content_id in distinct_ids(sessions, "content_id"):
            content = await self.uow.contents.get_by_id(content_id)
            if content is not None and content.genre is not None:
                stats[content.genre] = stats.get(content.genre, 0) + 1

        return stats

    async def get_top_content(self, limit: int = DEFAULT_TOP_LIMIT) -> dict[str, int]:
        """Most viewed catalog items across all users, by title."""
        sessions = await self.uow.viewing_sessions.get_all()
        counts = Counter(s.content_id for s in sessions if s.content_id is not None)

        result: dict[str, int] = {}
        for content_id, views in counts.most_common(max(limit, 0)):
            content = await self.uow.contents.get_by_id(content_id)
            if content is not None:
                result[content.title] = views

        return result

    async def get_top_channels(self, limit: int = DEFAULT_TOP_LIMIT) -> dict[str, int]:
        """Most viewed channels across all users, by channel name."""
        sessions = await self.uow.viewing_sessions.get_all()
        counts = Counter(s.channel_id for s in sessions if s.channel_id is not None)

        result: dict[str, int] = {}
        for channel_id, views in counts.most_common(max(limit, 0)):
            channel = await self.uow.channels.get_by_id(channel_id)
            if channel is not None:
                result[channel.name] = views

        return result

    async def get_total_watch_time(self, user_id: int) -> int:
        """Sum of recorded durations (seconds) of a user's sessions."""
        sessions = await self.uow.viewing_sessions.find(
            lambda s: s.duration is not None, user_id=user_id
        )
        return sum(s.duration or 0 for s in sessions)

    async def get_continue_watching(self, user_id: int) -> list[CatalogItem]:
        """Started but unfinished catalog items, most recently started first."""
        sessions = await self.uow.viewing_sessions.find(
            lambda s: s.content_id is not None and (s.progress or 0) > 0,
            user_id=user_id,
            completed=False,
        )
        sessions.sort(key=lambda s: s.start_time, reverse=True)

        contents: list[CatalogItem] = []
        for content_id in distinct_ids(sessions, "content_id")[:CONTINUE_WATCHING_LIMIT]:
            content = await self.uow.contents.get_by_id(content_id)
            if content is not None:
                contents.append(content)

        return contents
