"""Catalog recommendation engine based on viewing history.

Derives a genre (or channel category) affinity set from what a user has
already watched and ranks unseen catalog items or channels against it.
When the affinity match is too thin, the list is padded with the best
remaining items: highest rated content, or lowest numbered channels.
"""

import logging

from models import CatalogItem, Channel
from persistence import UnitOfWork
from recommendation.affinity import (
    build_affinity_set,
    distinct_ids,
    rank_with_backfill,
)

logger = logging.getLogger(__name__)

DEFAULT_RECOMMENDATION_COUNT = 10

# Tie-break weight for a genre match in similar-content ranking
GENRE_MATCH_SCORE = 2


def _rating(item: CatalogItem) -> float:
    return item.rating or 0


class RecommendationEngine:
    """Engine for generating catalog and channel recommendations.

    - Content: unseen items in the user's preferred genres, best rated first
    - Similar: items sharing genre or type with a given item
    - By genre: unseen items in one genre
    - Channels: unseen active channels in the user's preferred categories
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def _watched(self, user_id: int, attr: str) -> list[int]:
        sessions = await self.uow.viewing_sessions.find(user_id=user_id)
        return distinct_ids(sessions, attr)

    async def recommend_content(
        self, user_id: int, count: int = DEFAULT_RECOMMENDATION_COUNT
    ) -> list[CatalogItem]:
        """Unseen catalog items matching the user's genre affinity.

        Args:
            user_id: The viewer
            count: Number of items wanted

        Returns:
            Affinity matches ordered by rating then recency, followed by
            the highest rated remaining unseen items if short of `count`
        """
        watched = await self._watched(user_id, "content_id")
        genres = await build_affinity_set(
            watched, self.uow.contents.get_by_id, "genre"
        )
        catalog = await self.uow.contents.get_all()

        recommendations = rank_with_backfill(
            catalog,
            watched=set(watched),
            affinity=genres,
            tag="genre",
            primary_key=lambda c: (_rating(c), c.created_at),
            backfill_key=_rating,
            descending=True,
            count=count,
        )

        logger.debug(
            f"Recommended {len(recommendations)} items for user {user_id} "
            f"from {len(genres)} preferred genres"
        )
        return recommendations

    async def recommend_similar(
        self, content_id: int, count: int = DEFAULT_RECOMMENDATION_COUNT
    ) -> list[CatalogItem]:
        """Items sharing genre or type with `content_id`, genre matches first.

        Returns an empty list when the source item does not exist.
        """
        source = await self.uow.contents.get_by_id(content_id)
        if source is None:
            logger.debug(f"Content {content_id} not found, no similar items")
            return []

        catalog = await self.uow.contents.get_all()
        similar = [
            c for c in catalog
            if c.id != content_id
            and (c.genre == source.genre or c.type == source.type)
        ]
        similar.sort(
            key=lambda c: (
                GENRE_MATCH_SCORE if c.genre == source.genre else 0,
                _rating(c),
            ),
            reverse=True,
        )
        return similar[:max(count, 0)]

    async def recommend_by_genre(
        self,
        user_id: int,
        genre: str,
        count: int = DEFAULT_RECOMMENDATION_COUNT,
    ) -> list[CatalogItem]:
        """Unseen items of exactly `genre`, best rated then newest first."""
        watched = set(await self._watched(user_id, "content_id"))
        candidates = await self.uow.contents.find(
            lambda c: c.id not in watched, genre=genre
        )
        candidates.sort(key=lambda c: (_rating(c), c.created_at), reverse=True)
        return candidates[:max(count, 0)]

    async def recommend_channels(
        self, user_id: int, count: int = DEFAULT_RECOMMENDATION_COUNT
    ) -> list[Channel]:
        """Unseen active channels matching the user's category affinity.

        Matches are ordered by channel number, then padded with the lowest
        numbered remaining unseen active channels if short of `count`.
        """
        watched = await self._watched(user_id, "channel_id")
        categories = await build_affinity_set(
            watched, self.uow.channels.get_by_id, "category"
        )
        channels = await self.uow.channels.find(is_active=True)

        def by_number(c: Channel) -> int:
            return c.channel_number

        recommendations = rank_with_backfill(
            channels,
            watched=set(watched),
            affinity=categories,
            tag="category",
            primary_key=by_number,
            backfill_key=by_number,
            descending=False,
            count=count,
        )

        logger.debug(
            f"Recommended {len(recommendations)} channels for user {user_id} "
            f"from {len(categories)} preferred categories"
        )
        return recommendations
