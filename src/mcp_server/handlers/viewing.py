"""MCP handlers for viewing activity."""

from typing import Any

from config import RecommendationConfig
from mcp_server.handlers.params import optional_bool, optional_int, require_int
from models import WatchTimeSummary
from persistence import Database
from recommendation import ViewingTracker


class ViewingHandlers:
    """Handlers for session recording and watch statistics.

    Every call works in its own unit of work.
    """

    def __init__(self, database: Database, config: RecommendationConfig):
        self.database = database
        self.config = config

    def _tracker(self) -> ViewingTracker:
        return ViewingTracker(self.database.unit_of_work())

    async def start_viewing(self, args: dict[str, Any]) -> dict[str, Any]:
        """Record the start of playback."""
        session = await self._tracker().start_session(
            user_id=require_int(args, "user_id"),
            content_id=optional_int(args, "content_id"),
            channel_id=optional_int(args, "channel_id"),
            device_info=args.get("device_info"),
        )
        return {"success": True, "session": session.to_dict()}

    async def update_viewing_progress(self, args: dict[str, Any]) -> dict[str, Any]:
        """Update progress; unknown sessions are ignored."""
        session_id = require_int(args, "session_id")
        progress = require_int(args, "progress")
        completed = optional_bool(args, "completed")

        await self._tracker().update_progress(session_id, progress, completed)
        return {
            "success": True,
            "session_id": session_id,
            "progress": progress,
            "completed": completed,
        }

    async def get_viewing_history(self, args: dict[str, Any]) -> dict[str, Any]:
        user_id = require_int(args, "user_id")
        limit = optional_int(args, "limit", self.config.history_limit)

        history = await self._tracker().get_history(user_id, limit)
        return {
            "user_id": user_id,
            "history": [s.to_dict() for s in history],
            "count": len(history),
        }

    async def get_continue_watching(self, args: dict[str, Any]) -> dict[str, Any]:
        user_id = require_int(args, "user_id")
        items = await self._tracker().get_continue_watching(user_id)

        if not items:
            return {
                "user_id": user_id,
                "items": [],
                "message": "Nothing in progress. Start something new!",
            }
        return {
            "user_id": user_id,
            "items": [c.to_dict() for c in items],
            "count": len(items),
        }

    async def get_genre_stats(self, args: dict[str, Any]) -> dict[str, Any]:
        user_id = require_int(args, "user_id")
        genres = await self._tracker().get_genre_breakdown(user_id)
        return {"user_id": user_id, "genres": genres}

    async def get_total_watch_time(self, args: dict[str, Any]) -> dict[str, Any]:
        user_id = require_int(args, "user_id")
        total = await self._tracker().get_total_watch_time(user_id)
        return WatchTimeSummary(user_id=user_id, total_seconds=total).to_dict()

    async def get_top_content(self, args: dict[str, Any]) -> dict[str, Any]:
        limit = optional_int(args, "limit", 10)
        top = await self._tracker().get_top_content(limit)
        return {
            "content": [{"title": title, "views": views} for title, views in top.items()],
        }

    async def get_top_channels(self, args: dict[str, Any]) -> dict[str, Any]:
        limit = optional_int(args, "limit", 10)
        top = await self._tracker().get_top_channels(limit)
        return {
            "channels": [{"name": name, "views": views} for name, views in top.items()],
        }
