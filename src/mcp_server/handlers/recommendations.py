"""MCP handlers for content and channel recommendations."""

from typing import Any

from config import RecommendationConfig
from mcp_server.handlers.params import optional_int, require_int, require_str
from persistence import Database
from recommendation import RecommendationEngine


class RecommendationHandlers:
    """Handlers for recommendation tools."""

    def __init__(self, database: Database, config: RecommendationConfig):
        self.database = database
        self.config = config

    def _engine(self) -> RecommendationEngine:
        return RecommendationEngine(self.database.unit_of_work())

    def _count(self, args: dict[str, Any]) -> int:
        return optional_int(args, "count", self.config.default_count)

    async def recommend_content(self, args: dict[str, Any]) -> dict[str, Any]:
        """Personal recommendations for a user."""
        user_id = require_int(args, "user_id")
        recs = await self._engine().recommend_content(user_id, self._count(args))

        if not recs:
            return {
                "user_id": user_id,
                "recommendations": [],
                "message": "The catalog has nothing this user has not already watched.",
            }
        return {
            "user_id": user_id,
            "recommendations": [c.to_dict() for c in recs],
            "count": len(recs),
        }

    async def recommend_similar(self, args: dict[str, Any]) -> dict[str, Any]:
        content_id = require_int(args, "content_id")
        similar = await self._engine().recommend_similar(content_id, self._count(args))
        return {
            "content_id": content_id,
            "similar": [c.to_dict() for c in similar],
            "count": len(similar),
        }

    async def recommend_by_genre(self, args: dict[str, Any]) -> dict[str, Any]:
        user_id = require_int(args, "user_id")
        genre = require_str(args, "genre")
        recs = await self._engine().recommend_by_genre(user_id, genre, self._count(args))
        return {
            "user_id": user_id,
            "genre": genre,
            "recommendations": [c.to_dict() for c in recs],
            "count": len(recs),
        }

    async def recommend_channels(self, args: dict[str, Any]) -> dict[str, Any]:
        user_id = require_int(args, "user_id")
        channels = await self._engine().recommend_channels(user_id, self._count(args))
        return {
            "user_id": user_id,
            "channels": [c.to_dict() for c in channels],
            "count": len(channels),
        }
