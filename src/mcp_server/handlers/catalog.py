"""MCP handlers for the content catalog."""

from typing import Any

from mcp_server.handlers.params import optional_datetime, optional_int, require_int, require_str
from models import CatalogItem, ContentType
from persistence import Database
from services import ContentService
from utils.errors import NotFoundError

# Fields callers may set on create and update
EDITABLE_FIELDS = (
    "title", "stream_url", "type", "description", "thumbnail_url",
    "duration", "release_date", "genre", "rating",
)


def apply_content_fields(item: CatalogItem, args: dict[str, Any]) -> CatalogItem:
    """Copy editable fields present in `args` onto `item`."""
    for name in EDITABLE_FIELDS:
        if name not in args:
            continue
        if name == "type":
            item.type = ContentType(args["type"])
        elif name == "duration":
            item.duration = optional_int(args, "duration")
        elif name == "release_date":
            item.release_date = optional_datetime(args, "release_date")
        elif name == "rating":
            item.rating = None if args["rating"] is None else float(args["rating"])
        elif name in ("title", "stream_url"):
            setattr(item, name, require_str(args, name))
        else:
            setattr(item, name, args[name])
    return item


class CatalogHandlers:
    """Handlers for catalog browsing and management."""

    def __init__(self, database: Database):
        self.database = database

    def _service(self) -> ContentService:
        return ContentService(self.database.unit_of_work())

    async def list_content(self, args: dict[str, Any]) -> dict[str, Any]:
        """List items, filtered by type or genre when given."""
        service = self._service()
        content_type = args.get("type")
        genre = args.get("genre")

        if content_type:
            items = await service.get_by_type(ContentType(content_type))
            if genre:
                items = [c for c in items if c.genre == genre]
        elif genre:
            items = await service.get_by_genre(genre)
        else:
            items = await service.get_all()

        return {"content": [c.to_dict() for c in items], "count": len(items)}

    async def get_content(self, args: dict[str, Any]) -> dict[str, Any]:
        content_id = require_int(args, "content_id")
        item = await self._service().get_by_id(content_id)
        if item is None:
            raise NotFoundError("Content", content_id)
        return {"content": item.to_dict()}

    async def search_content(self, args: dict[str, Any]) -> dict[str, Any]:
        query = require_str(args, "query")
        items = await self._service().search(query)
        return {"query": query, "content": [c.to_dict() for c in items], "count": len(items)}

    async def get_trending_content(self, args: dict[str, Any]) -> dict[str, Any]:
        items = await self._service().get_trending(optional_int(args, "count", 10))
        return {"content": [c.to_dict() for c in items], "count": len(items)}

    async def get_recent_content(self, args: dict[str, Any]) -> dict[str, Any]:
        items = await self._service().get_recent(optional_int(args, "count", 10))
        return {"content": [c.to_dict() for c in items], "count": len(items)}

    async def create_content(self, args: dict[str, Any]) -> dict[str, Any]:
        require_str(args, "title")
        require_str(args, "stream_url")
        if "type" not in args:
            raise KeyError("Missing required parameter: type")

        item = apply_content_fields(CatalogItem(), args)
        await self._service().create(item)
        return {"success": True, "content": item.to_dict()}

    async def update_content(self, args: dict[str, Any]) -> dict[str, Any]:
        content_id = require_int(args, "content_id")
        service = self._service()

        item = await service.get_by_id(content_id)
        if item is None:
            raise NotFoundError("Content", content_id)

        apply_content_fields(item, args)
        await service.update(item)
        return {"success": True, "content": item.to_dict()}

    async def delete_content(self, args: dict[str, Any]) -> dict[str, Any]:
        content_id = require_int(args, "content_id")
        if not await self._service().delete(content_id):
            raise NotFoundError("Content", content_id)
        return {"success": True, "content_id": content_id}
