"""MCP handlers for stream and manifest lookups."""

from typing import Any

from mcp_server.handlers.params import optional_int
from persistence import Database
from services import StreamingService
from utils.errors import NotFoundError


def _target(args: dict[str, Any]) -> tuple[str, int]:
    content_id = optional_int(args, "content_id")
    channel_id = optional_int(args, "channel_id")
    if (content_id is None) == (channel_id is None):
        raise ValueError("Give exactly one of 'content_id' or 'channel_id'")
    if content_id is not None:
        return "content", content_id
    return "channel", channel_id


class StreamingHandlers:
    """Handlers for streaming tools."""

    def __init__(self, database: Database):
        self.database = database

    def _service(self) -> StreamingService:
        return StreamingService(self.database.unit_of_work())

    async def get_stream_url(self, args: dict[str, Any]) -> dict[str, Any]:
        kind, target_id = _target(args)
        service = self._service()

        if kind == "content":
            stream = await service.get_content_stream(target_id)
        else:
            stream = await service.get_channel_stream(target_id)

        if stream is None:
            raise NotFoundError(kind.capitalize(), target_id)
        return stream.to_dict()

    async def get_stream_manifest(self, args: dict[str, Any]) -> dict[str, Any]:
        kind, target_id = _target(args)
        service = self._service()

        if kind == "content":
            manifest = await service.get_content_manifest(target_id)
        else:
            manifest = await service.get_channel_manifest(target_id)

        if manifest is None:
            raise NotFoundError(kind.capitalize(), target_id)
        return manifest.to_dict()
