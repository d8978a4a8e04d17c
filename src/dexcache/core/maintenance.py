"""Cache statistics and maintenance operations.

These functions aggregate blob store statistics with the data cache
counters and clear domains while keeping the in-memory caches consistent
with what is left on disk.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from dexcache.core.models import (
    ALL_DOMAINS,
    CacheCounters,
    CacheDomain,
    CacheStats,
    StoreResult,
    parse_clear_target,
)


if TYPE_CHECKING:
    from dexcache.core.data_cache import DataCache
    from dexcache.core.media import MediaCache
    from dexcache.core.ports import BlobStorePort


logger = logging.getLogger(__name__)


def collect_stats(store: BlobStorePort, counters: CacheCounters | None = None) -> CacheStats:
    """Compute per-domain file counts and sizes plus performance counters.

    Args:
        store: The blob store to inspect.
        counters: Data cache counters; zeros if omitted.

    Returns:
        CacheStats with data, sprites, audio, total and performance.
    """
    return CacheStats(
        data=store.stat(CacheDomain.DATA),
        sprites=store.stat(CacheDomain.SPRITES),
        audio=store.stat(CacheDomain.AUDIO),
        performance=counters or CacheCounters(),
    )


def clear_cache(
    store: BlobStorePort,
    target: str | CacheDomain,
    *,
    data_cache: DataCache | None = None,
    media_caches: Iterable[MediaCache] = (),
) -> StoreResult:
    """Clear one domain or all of them.

    Clearing the data domain also resets the data cache's in-memory map and
    counters; clearing a media domain drops the matching media cache's
    resolved locations. Memory is only reset once the disk clear succeeded.

    Args:
        store: The blob store to clear.
        target: "data", "sprites", "audio" or "all".
        data_cache: Facade to reset when data is cleared.
        media_caches: Media caches to reset when their domain is cleared.

    Returns:
        The store's result.

    Raises:
        InvalidDomainError: If target is not a domain or "all".
    """
    resolved = parse_clear_target(target)
    result = store.clear(resolved)
    if not result.success:
        logger.error("Error clearing %s cache: %s", resolved, result.error)
        return result

    cleared = set(CacheDomain) if resolved == ALL_DOMAINS else {resolved}
    if data_cache is not None and CacheDomain.DATA in cleared:
        data_cache.reset()
    for media in media_caches:
        if media.domain in cleared:
            media.clear_memory()
    logger.info("%s cache cleared", str(resolved).capitalize())
    return result
