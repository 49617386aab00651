"""Shared filtering and ranking helpers for recommendations."""

from typing import Any, Awaitable, Callable, Iterable, Sequence, TypeVar

T = TypeVar("T")

# Genre/category discovery looks at no more than this many watched ids
AFFINITY_LOOKUP_LIMIT = 20


def distinct_ids(sessions: Iterable[Any], attr: str) -> list[int]:
    """Distinct non-null ids from viewing sessions, in first-seen order."""
    return list(
        dict.fromkeys(
            getattr(s, attr) for s in sessions if getattr(s, attr) is not None
        )
    )


async def build_affinity_set(
    ids: Sequence[int],
    resolve: Callable[[int], Awaitable[Any]],
    tag: str,
    limit: int = AFFINITY_LOOKUP_LIMIT,
) -> set[str]:
    """Collect the distinct `tag` values of the first `limit` resolvable ids."""
    affinity: set[str] = set()
    for item_id in ids[:limit]:
        item = await resolve(item_id)
        value = getattr(item, tag, None) if item is not None else None
        if value is not None:
            affinity.add(value)
    return affinity


def rank_with_backfill(
    candidates: Sequence[T],
    *,
    watched: set[int],
    affinity: set[str],
    tag: str,
    primary_key: Callable[[T], Any],
    backfill_key: Callable[[T], Any],
    descending: bool,
    count: int,
) -> list[T]:
    """Rank unseen candidates matching the affinity set, padding if short.

    Candidates whose `tag` is in `affinity` are ordered by `primary_key`.
    If fewer than `count` match, the rest of the unseen candidates fill the
    gap ordered by `backfill_key`. Sorting is stable, so ties keep store
    order.
    """
    if count <= 0:
        return []

    unseen = [c for c in candidates if getattr(c, "id") not in watched]

    primary = [
        c for c in unseen
        if getattr(c, tag) is not None and getattr(c, tag) in affinity
    ]
    ranked = sorted(primary, key=primary_key, reverse=descending)[:count]

    if len(ranked) < count:
        selected = {getattr(c, "id") for c in ranked}
        remaining = [c for c in unseen if getattr(c, "id") not in selected]
        backfill = sorted(remaining, key=backfill_key, reverse=descending)
        ranked = ranked + backfill[: count - len(ranked)]

    return ranked
