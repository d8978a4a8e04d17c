"""Bulk aggregation of the complete record collection.

Builds one composite record per collection item (detail, species,
encounters and evolution chain merged), persists each under its name and
id, and persists the whole list as a snapshot that short-circuits every
later load. When a load cannot complete, the collection is rebuilt from
whatever composite records are already on disk.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from dexcache.core import keys
from dexcache.core.exceptions import AggregationError, DexcacheError, NoCachedDataError
from dexcache.core.failures import FailureLog
from dexcache.core.ports import NullProgressReporter


if TYPE_CHECKING:
    from dexcache.core.data_cache import DataCache
    from dexcache.core.ports import ExecutorPort, ProgressReporter


logger = logging.getLogger(__name__)

DEFAULT_MAX_RECORDS = 1302
RECORD_KIND = "record"

_WHITESPACE = re.compile(r"\s+")


def describe(species: dict[str, Any] | None, language: str = "en") -> str:
    """Latest flavor text of a species in one language, whitespace-normalized."""
    if not species:
        return "No description available."
    entries = [
        entry
        for entry in species.get("flavor_text_entries") or []
        if (entry.get("language") or {}).get("name") == language
    ]
    if not entries:
        return "No description available."
    return _WHITESPACE.sub(" ", entries[-1].get("flavor_text", "")).strip()


class BulkAggregator:
    """Materializes the full collection of composite records.

    Batches run one after another; items inside a batch are fanned out on
    the executor and joined before the next batch starts, so at most
    batch_size items are in flight.

    Args:
        data_cache: Facade used for every lookup and write.
        executor: Executor for fan-out within a batch. None runs items
            sequentially in the calling thread.
        batch_size: Items per batch.
        batch_delay: Seconds to wait between batches.
        failures: Shared failure log; a private one is created if omitted.
        reconstruct_ceiling: Highest record id accepted when rebuilding
            the collection from disk.
        sleep: Sleep function (injected by tests).
    """

    def __init__(
        self,
        data_cache: DataCache,
        *,
        executor: ExecutorPort | None = None,
        batch_size: int = 5,
        batch_delay: float = 0.1,
        failures: FailureLog | None = None,
        reconstruct_ceiling: int = DEFAULT_MAX_RECORDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if batch_delay < 0:
            raise ValueError("batch_delay cannot be negative")
        self._cache = data_cache
        self._executor = executor
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.failures = failures if failures is not None else FailureLog()
        self.reconstruct_ceiling = reconstruct_ceiling
        self._sleep = sleep

    @property
    def collection(self) -> str:
        return self._cache.collection

    @property
    def snapshot_key(self) -> str:
        return keys.aggregate_key(self.collection)

    def get_cached_snapshot(self) -> list[dict[str, Any]] | None:
        """Return the persisted full collection, or None if absent or empty."""
        snapshot = self._cache.get_cached_data(self.snapshot_key)
        if isinstance(snapshot, list) and snapshot:
            return snapshot
        return None

    def get_all_records(
        self,
        max_count: int = DEFAULT_MAX_RECORDS,
        progress: ProgressReporter | None = None,
    ) -> list[dict[str, Any]]:
        """Return every composite record, loading from the network if needed.

        Args:
            max_count: Maximum number of list entries to process.
            progress: Optional reporter, called with (completed, total, name)
                after each item.

        Returns:
            Composite records. Comes from the snapshot when one exists,
            otherwise from a fresh load, otherwise from records found on disk.

        Raises:
            NoCachedDataError: If loading failed and nothing was on disk.
        """
        snapshot = self.get_cached_snapshot()
        if snapshot is not None:
            logger.info("Loaded %d %s records from cache", len(snapshot), self.collection)
            return snapshot

        try:
            return self._load_from_network(max_count, progress or NullProgressReporter())
        except DexcacheError as e:
            logger.error("Error fetching all %s records: %s", self.collection, e)
            partial = self.reconstruct_from_cache()
            if partial:
                logger.info("Loaded %d records from partial cache", len(partial))
                return partial
            raise NoCachedDataError(offline=not self._cache.is_online, cause=e) from e

    def _load_from_network(
        self, max_count: int, progress: ProgressReporter
    ) -> list[dict[str, Any]]:
        listing = self._cache.get_list(max_count, 0)
        if not listing:
            raise AggregationError(f"Could not fetch {self.collection} list")
        entries = listing.get("results") if isinstance(listing, dict) else None
        if not isinstance(entries, list):
            raise AggregationError(f"Malformed {self.collection} list response")

        names = [
            str(entry["name"])
            for entry in entries[:max_count]
            if isinstance(entry, dict) and entry.get("name")
        ]
        total = len(names)
        logger.info("Found %d %s entries to load", total, self.collection)

        task = f"Loading {self.collection}"
        callback = progress.start_task(task, total)
        records: list[dict[str, Any]] = []
        completed = 0
        try:
            for start in range(0, total, self.batch_size):
                batch = names[start : start + self.batch_size]
                for name, record in zip(batch, self._run_batch(batch), strict=True):
                    completed += 1
                    if record is not None:
                        records.append(record)
                    callback(completed, total, name)
                logger.debug("Loaded %d/%d %s records", len(records), total, self.collection)

                if start + self.batch_size < total and self.batch_delay:
                    self._sleep(self.batch_delay)
        finally:
            progress.finish_task(task)

        if not records:
            raise AggregationError(f"No {self.collection} records could be loaded")

        self._store_snapshot(records)
        return records

    def _run_batch(self, names: list[str]) -> list[dict[str, Any] | None]:
        if self._executor is None:
            return [self._build_isolated(name) for name in names]
        futures = [self._executor.submit(self._build_isolated, name) for name in names]
        return [future.result() for future in futures]  # type: ignore[misc]

    def _build_isolated(self, name: str) -> dict[str, Any] | None:
        """Build one composite; a failure is recorded instead of raised."""
        try:
            record = self.build_composite(name)
        except Exception as e:  # noqa: BLE001
            logger.warning("Error fetching %s: %s", name, e)
            self.failures.record(name, RECORD_KIND, str(e) or type(e).__name__)
            return None
        if record is None:
            self.failures.record(name, RECORD_KIND, f"No cached data for {name} and offline")
            return None
        self.failures.resolve(name, RECORD_KIND)
        return record

    def build_composite(self, id_or_name: str | int) -> dict[str, Any] | None:
        """Fetch and merge the sub-resources of one item and persist them.

        Missing encounters become an empty list and a missing evolution
        chain becomes None; the item is still valid without them.

        Returns:
            The composite record, or None if the detail record is unavailable
            (offline and not cached).

        Raises:
            RemoteFetchError: If the detail or species fetch fails while online.
        """
        details = self._cache.get_detail(id_or_name)
        if not details:
            return None

        species_ref = keys.extract_resource_id((details.get("species") or {}).get("url"))
        species = self._cache.get_species(species_ref or id_or_name)

        encounters: list[Any] = []
        try:
            encounters = self._cache.get_encounters(details["id"]) or []
        except DexcacheError as e:
            logger.warning("Could not fetch encounters for %s: %s", id_or_name, e)

        evolution_chain = None
        chain_ref = (species or {}).get("evolution_chain") or {}
        chain_id = keys.extract_resource_id(chain_ref.get("url"))
        if chain_id:
            try:
                evolution_chain = self._cache.get_evolution_chain(chain_id)
            except DexcacheError as e:
                logger.warning("Could not fetch evolution chain for %s: %s", id_or_name, e)

        composite = {
            **details,
            "species": species or None,
            "encounters": encounters,
            "evolution_chain": evolution_chain or None,
            "description": describe(species),
        }
        for ref in {str(details.get("name", id_or_name)), str(details["id"])}:
            key = keys.composite_key(self.collection, ref)
            self._cache.remember(key, composite)
            self._cache.cache_data(key, composite)
        return composite

    def get_complete_record(self, id_or_name: str | int) -> dict[str, Any] | None:
        """Return one composite record, from cache when available."""
        ref = str(id_or_name).lower()
        cached = self._cache.get_cached_data(keys.composite_key(self.collection, ref))
        if cached is not None:
            return cached
        return self.build_composite(ref)

    def reconstruct_from_cache(self) -> list[dict[str, Any]]:
        """Rebuild the collection from composite records already on disk.

        Lists the data domain by composite-key prefix instead of probing
        every possible id. Records stored under both name and id are
        de-duplicated by id.

        Returns:
            Records sorted by id; empty if none are cached.
        """
        by_id: dict[int, dict[str, Any]] = {}
        for key in self._cache.cached_keys(keys.composite_prefix(self.collection)):
            record = self._cache.get_cached_data(key)
            if not isinstance(record, dict):
                continue
            record_id = record.get("id")
            if not isinstance(record_id, int) or record_id > self.reconstruct_ceiling:
                continue
            by_id.setdefault(record_id, record)
        logger.debug("Found %d %s records in partial cache", len(by_id), self.collection)
        return [by_id[record_id] for record_id in sorted(by_id)]

    def retry_failed(self, item_id: str | None = None) -> list[dict[str, Any]]:
        """Retry failed record downloads.

        Successful items leave the failure log and are merged into the
        snapshot if one exists.

        Args:
            item_id: Retry only this item; None retries all failed records.

        Returns:
            Records that were recovered.
        """
        pending = [
            entry.item_id
            for entry in self.failures.entries(RECORD_KIND)
            if item_id is None or entry.item_id == item_id
        ]
        recovered = [r for r in (self._build_isolated(name) for name in pending) if r]
        if recovered:
            snapshot = self.get_cached_snapshot()
            if snapshot is not None:
                merged = {r["id"]: r for r in snapshot}
                merged.update({r["id"]: r for r in recovered})
                self._store_snapshot([merged[k] for k in sorted(merged)])
        return recovered

    def _store_snapshot(self, records: list[dict[str, Any]]) -> None:
        self._cache.remember(self.snapshot_key, records)
        if self._cache.cache_data(self.snapshot_key, records):
            logger.info("Cached %d complete %s records", len(records), self.collection)
