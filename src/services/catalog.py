"""Catalog (on-demand content) service."""

import logging

from models import CatalogItem, ContentType, utcnow
from persistence import UnitOfWork

logger = logging.getLogger(__name__)


class ContentService:
    """Read and manage catalog items."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def get_all(self) -> list[CatalogItem]:
        return await self.uow.contents.get_all()

    async def get_by_id(self, content_id: int) -> CatalogItem | None:
        return await self.uow.contents.get_by_id(content_id)

    async def get_by_type(self, content_type: ContentType) -> list[CatalogItem]:
        return await self.uow.contents.find(type=content_type)

    async def get_by_genre(self, genre: str) -> list[CatalogItem]:
        return await self.uow.contents.find(genre=genre)

    async def search(self, term: str) -> list[CatalogItem]:
        """Case-insensitive substring match on title or description."""
        needle = term.casefold()
        return await self.uow.contents.find(
            lambda c: needle in c.title.casefold()
            or (c.description is not None and needle in c.description.casefold())
        )

    async def create(self, item: CatalogItem) -> CatalogItem:
        """Persist a new catalog item and return it with its id."""
        now = utcnow()
        item.created_at = now
        item.updated_at = now

        self.uow.contents.add(item)
        await self.uow.save_changes()

        logger.info(f"Created content {item.id}: {item.title}")
        return item

    async def update(self, item: CatalogItem) -> None:
        item.updated_at = utcnow()
        self.uow.contents.update(item)
        await self.uow.save_changes()
        logger.info(f"Updated content {item.id}")

    async def delete(self, content_id: int) -> bool:
        """Delete a catalog item. Returns False if it did not exist."""
        item = await self.uow.contents.get_by_id(content_id)
        if item is None:
            return False

        self.uow.contents.remove(item)
        await self.uow.save_changes()
        logger.info(f"Deleted content {content_id}")
        return True

    async def get_trending(self, count: int) -> list[CatalogItem]:
        """Trending items.

        Currently the newest items.
        """
        return await self.get_recent(count)

    async def get_recent(self, count: int) -> list[CatalogItem]:
        """Newest catalog items first."""
        items = await self.uow.contents.get_all()
        items.sort(key=lambda c: c.created_at, reverse=True)
        return items[:max(count, 0)]
