"""MCP handlers for channels and the program guide."""

from typing import Any

from mcp_server.handlers.params import optional_bool, require_datetime, require_int
from persistence import Database
from services import EpgService
from utils.errors import NotFoundError


class GuideHandlers:
    """Handlers for channel lineup and EPG tools."""

    def __init__(self, database: Database):
        self.database = database

    def _service(self) -> EpgService:
        return EpgService(self.database.unit_of_work())

    async def list_channels(self, args: dict[str, Any]) -> dict[str, Any]:
        service = self._service()
        if optional_bool(args, "active_only", True):
            channels = await service.get_active_channels()
        else:
            channels = await service.get_all_channels()
            channels.sort(key=lambda c: c.channel_number)
        return {"channels": [c.to_dict() for c in channels], "count": len(channels)}

    async def get_channel(self, args: dict[str, Any]) -> dict[str, Any]:
        """A channel and whatever is on it right now."""
        channel_id = require_int(args, "channel_id")
        service = self._service()

        channel = await service.get_channel(channel_id)
        if channel is None:
            raise NotFoundError("Channel", channel_id)

        now_playing = await service.get_current_program_for_channel(channel_id)
        return {
            "channel": channel.to_dict(),
            "now_playing": now_playing.to_dict() if now_playing else None,
        }

    async def get_channel_programs(self, args: dict[str, Any]) -> dict[str, Any]:
        channel_id = require_int(args, "channel_id")
        programs = await self._service().get_programs_by_channel(channel_id)
        return {
            "channel_id": channel_id,
            "programs": [p.to_dict() for p in programs],
            "count": len(programs),
        }

    async def get_current_programs(self, args: dict[str, Any]) -> dict[str, Any]:
        programs = await self._service().get_current_programs()
        return {"programs": [p.to_dict() for p in programs], "count": len(programs)}

    async def get_programs_in_range(self, args: dict[str, Any]) -> dict[str, Any]:
        start = require_datetime(args, "start")
        end = require_datetime(args, "end")
        if end < start:
            raise ValueError("'end' must not be before 'start'")

        programs = await self._service().get_programs_in_range(start, end)
        return {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "programs": [p.to_dict() for p in programs],
            "count": len(programs),
        }
