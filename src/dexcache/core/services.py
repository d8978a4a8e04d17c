"""Core domain services for dexcache."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from dexcache.core import maintenance
from dexcache.core.aggregator import DEFAULT_MAX_RECORDS, BulkAggregator
from dexcache.core.data_cache import DataCache
from dexcache.core.failures import FailureLog
from dexcache.core.media import (
    MediaCache,
    SpriteOptions,
    cry_filename,
    cry_url,
    sprite_filename,
    sprite_url,
)
from dexcache.core.models import CacheDomain


if TYPE_CHECKING:
    from dexcache.config import DexConfig
    from dexcache.core.models import CacheStats, FailureRecord, StoreResult
    from dexcache.core.ports import (
        BlobStorePort,
        ExecutorPort,
        GatewayPort,
        ProgressReporter,
    )


logger = logging.getLogger(__name__)


class Dex:
    """The operations the presentation layer calls.

    Wires one data cache, one bulk aggregator and the sprite and audio
    caches around a shared blob store, gateway and failure log.
    """

    def __init__(
        self,
        store: BlobStorePort,
        gateway: GatewayPort,
        *,
        data_cache: DataCache | None = None,
        executor: ExecutorPort | None = None,
        batch_size: int = 5,
        batch_delay: float = 0.1,
        reconstruct_ceiling: int = DEFAULT_MAX_RECORDS,
        max_records: int = DEFAULT_MAX_RECORDS,
    ) -> None:
        self._store = store
        self._executor = executor
        self.max_records = max_records
        self.failure_log = FailureLog()
        self.data_cache = data_cache or DataCache(store, gateway)
        self.aggregator = BulkAggregator(
            self.data_cache,
            executor=executor,
            batch_size=batch_size,
            batch_delay=batch_delay,
            failures=self.failure_log,
            reconstruct_ceiling=reconstruct_ceiling,
        )
        self.sprites = MediaCache(
            store, gateway, CacheDomain.SPRITES, failures=self.failure_log
        )
        self.audio = MediaCache(store, gateway, CacheDomain.AUDIO, failures=self.failure_log)

    @classmethod
    def from_config(cls, config: DexConfig) -> Dex:
        """Create a Dex with the default adapters for a configuration.

        Uses FileBlobStore under config.data_root (NullBlobStore when
        config.persistent is False), RequestsGateway and a thread pool
        sized to the batch size. Probes connectivity if configured to.

        Args:
            config: Runtime settings.

        Returns:
            A ready-to-use Dex.
        """
        from dexcache.adapters.executor import ThreadPoolExecutorAdapter
        from dexcache.adapters.http import RequestsGateway
        from dexcache.adapters.store import FileBlobStore, NullBlobStore

        store: BlobStorePort = (
            FileBlobStore(config.data_root) if config.persistent else NullBlobStore()
        )
        gateway = RequestsGateway(timeout=config.request_timeout)
        data_cache = DataCache(
            store,
            gateway,
            base_url=config.base_url,
            collection=config.collection,
            probe_url=config.resolved_probe_url,
            probe_timeout=config.probe_timeout,
            online=config.online,
        )
        dex = cls(
            store,
            gateway,
            data_cache=data_cache,
            executor=ThreadPoolExecutorAdapter(max_workers=config.batch_size),
            batch_size=config.batch_size,
            batch_delay=config.batch_delay,
            reconstruct_ceiling=config.reconstruct_ceiling,
            max_records=config.max_records,
        )
        if config.probe_on_start:
            data_cache.check_connection()
        return dex

    def close(self) -> None:
        """Release the executor's worker threads."""
        if self._executor is not None:
            self._executor.shutdown()

    def __enter__(self) -> Dex:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # -- data -------------------------------------------------------------

    def fetch_resource(self, url: str, cache_key: str | None = None) -> Any | None:
        """Fetch one JSON resource through the data cache.

        Returns:
            The resource, or None when offline and not cached.

        Raises:
            RemoteFetchError: If online and the request fails.
        """
        return self.data_cache.fetch_data(url, cache_key)

    def get_all_records(
        self,
        max_count: int | None = None,
        progress: ProgressReporter | None = None,
    ) -> list[dict[str, Any]]:
        """Return the full record collection.

        Raises:
            NoCachedDataError: If nothing could be loaded or rebuilt.
        """
        return self.aggregator.get_all_records(max_count or self.max_records, progress)

    def get_cached_record(self, key: str) -> Any | None:
        """Look a logical key up in memory and on disk only."""
        return self.data_cache.get_cached_data(key)

    def get_complete_record(self, id_or_name: str | int) -> dict[str, Any] | None:
        return self.aggregator.get_complete_record(id_or_name)

    def check_connectivity(self) -> dict[str, bool]:
        return {"online": self.data_cache.check_connection()}

    # -- media ------------------------------------------------------------

    def load_sprite(
        self, record: dict[str, Any], options: SpriteOptions | None = None
    ) -> str | None:
        """Local path (or remote URL fallback) of a record's sprite."""
        url = sprite_url(record, options)
        if not url:
            return None
        return self.sprites.load(url, sprite_filename(record, options))

    def load_cry(self, record_id: int | str) -> str:
        """Local path (or remote URL fallback) of a record's cry."""
        return self.audio.load(cry_url(record_id), cry_filename(record_id))

    def preload_sprites(
        self,
        records: list[dict[str, Any]],
        limit: int = 20,
        options: SpriteOptions | None = None,
    ) -> int:
        """Download the default and shiny sprites of the first records.

        Never raises: failed downloads land in the failure log and
        malformed records are logged and skipped.

        Args:
            records: Records, typically from get_all_records().
            limit: How many records from the start of the list to warm.
            options: Base sprite options; the shiny flag is varied.

        Returns:
            Number of sprites now available as local files.
        """
        base = options or SpriteOptions()
        variants = (replace(base, shiny=False), replace(base, shiny=True))
        local = 0
        for record in records[:limit]:
            for variant in variants:
                try:
                    location = self.load_sprite(record, variant)
                    filename = sprite_filename(record, variant)
                except (KeyError, TypeError, ValueError) as e:
                    item = str(record.get("name") or record.get("id") or "unknown")
                    logger.warning("Cannot preload sprites for %s: %s", item, e)
                    self.failure_log.record(item, self.sprites.kind, f"malformed record: {e}")
                    break
                if location and self.sprites.cached_path(filename) is not None:
                    local += 1
        logger.debug("Preloaded %d sprites for %d records", local, len(records[:limit]))
        return local

    # -- maintenance ------------------------------------------------------

    def get_stats(self) -> CacheStats:
        return maintenance.collect_stats(self._store, self.data_cache.counters)

    def clear_cache(self, target: str | CacheDomain = "all") -> StoreResult:
        """Clear a domain ("data", "sprites", "audio") or "all".

        Raises:
            InvalidDomainError: If target is not recognised.
        """
        return maintenance.clear_cache(
            self._store,
            target,
            data_cache=self.data_cache,
            media_caches=(self.sprites, self.audio),
        )

    # -- failures ---------------------------------------------------------

    @property
    def failures(self) -> list[FailureRecord]:
        return self.failure_log.entries()

    def retry_failed(self, item_id: str | None = None) -> list[dict[str, Any]]:
        """Retry failed downloads: records, then sprites and cries.

        Anything that succeeds leaves the failure log.

        Args:
            item_id: Retry only this record name or media filename.

        Returns:
            Records that were recovered.
        """
        recovered = self.aggregator.retry_failed(item_id)
        for media in (self.sprites, self.audio):
            media.retry_failed(item_id)
        return recovered

    def clear_failed(self) -> int:
        return self.failure_log.clear()
