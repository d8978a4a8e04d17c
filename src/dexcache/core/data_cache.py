"""Data cache facade: memory, then disk, then network.

DataCache decides which source answers a lookup and keeps the faster
sources warm. It also owns the online/offline state that selects between
raising on a network failure and degrading to an empty result.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from dexcache.core import keys
from dexcache.core.exceptions import CacheCorruptError, RemoteFetchError
from dexcache.core.models import CacheCounters, CacheDomain


if TYPE_CHECKING:
    from dexcache.core.ports import BlobStorePort, GatewayPort


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://pokeapi.co/api/v2"


class DataCache:
    """Three-tier lookup for JSON resources.

    One instance per running application; construct it explicitly and pass
    it to whatever needs it.

    Args:
        store: Persistent blob store (data domain is used).
        gateway: Remote fetch gateway.
        base_url: Root of the remote REST API.
        collection: Name of the collection endpoint (e.g. "pokemon").
        probe_url: URL used by check_connection(). Defaults to the first
            detail record of the collection.
        probe_timeout: Seconds before a connectivity probe gives up.
        online: Initial connectivity state.
    """

    def __init__(
        self,
        store: BlobStorePort,
        gateway: GatewayPort,
        *,
        base_url: str = DEFAULT_BASE_URL,
        collection: str = "pokemon",
        probe_url: str | None = None,
        probe_timeout: float = 5.0,
        online: bool = True,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self.base_url = base_url.rstrip("/")
        self.collection = collection
        self.probe_url = probe_url or f"{self.base_url}/{collection}/1"
        self.probe_timeout = probe_timeout
        self._online = online
        self._memory: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._errors = 0

    # -- connectivity -----------------------------------------------------

    @property
    def is_online(self) -> bool:
        return self._online

    def set_online(self, online: bool) -> None:
        """Push a connectivity change from the environment."""
        if online != self._online:
            logger.info("Connectivity changed: %s", "online" if online else "offline")
        self._online = online

    def check_connection(self) -> bool:
        """Probe the remote API and update the connectivity state.

        Returns:
            The new online state.
        """
        online = self._gateway.probe(self.probe_url, self.probe_timeout)
        self.set_online(online)
        return online

    # -- counters ---------------------------------------------------------

    @property
    def counters(self) -> CacheCounters:
        """Snapshot of the hit/miss/error counters."""
        with self._lock:
            return CacheCounters(hits=self._hits, misses=self._misses, errors=self._errors)

    def _count(self, *, hits: int = 0, misses: int = 0, errors: int = 0) -> None:
        with self._lock:
            self._hits += hits
            self._misses += misses
            self._errors += errors

    def reset(self) -> None:
        """Drop the in-memory map and zero the counters."""
        with self._lock:
            self._memory.clear()
            self._hits = 0
            self._misses = 0
            self._errors = 0

    # -- primitives -------------------------------------------------------

    def remember(self, key: str, value: Any) -> None:
        """Store a value in the in-memory map only."""
        with self._lock:
            self._memory[key] = value

    def _recall(self, key: str) -> tuple[bool, Any]:
        with self._lock:
            if key in self._memory:
                return True, self._memory[key]
        return False, None

    def _read_disk(self, key: str) -> tuple[bool, Any]:
        filename = keys.data_filename(key)
        try:
            result = self._store.get(CacheDomain.DATA, filename)
        except CacheCorruptError as e:
            logger.warning("Cache read error for %s: %s", key, e)
            self._count(errors=1)
            return False, None
        if not result.success:
            logger.warning("Cache read error for %s: %s", key, result.error)
            self._count(errors=1)
            return False, None
        return result.found, result.value

    def cache_data(self, key: str, value: Any) -> bool:
        """Persist a value to disk under a logical key.

        Used for values that do not correspond to a single remote URL, such
        as merged composite records. A failed write is logged, not raised.

        Returns:
            True if the write stuck.
        """
        result = self._store.put(CacheDomain.DATA, keys.data_filename(key), value)
        if not result.success:
            logger.warning("Cache write error for %s: %s", key, result.error)
            return False
        return True

    def get_cached_data(self, key: str) -> Any | None:
        """Look a key up in memory, then on disk. Never touches the network."""
        found, value = self._recall(key)
        if found:
            return value
        found, value = self._read_disk(key)
        if found:
            self.remember(key, value)
            return value
        return None

    def cached_keys(self, prefix: str = "") -> list[str]:
        """Sanitized keys of data-domain entries on disk starting with prefix.

        Each returned key reads back through get_cached_data() unchanged,
        because sanitize() is idempotent.
        """
        filenames = self._store.list_filenames(CacheDomain.DATA, keys.sanitize(prefix))
        return [name.removesuffix(".json") for name in filenames if name.endswith(".json")]

    def invalidate(self, key: str) -> None:
        """Forget a single key in memory and on disk."""
        with self._lock:
            self._memory.pop(key, None)
        result = self._store.delete(CacheDomain.DATA, keys.data_filename(key))
        if not result.success:
            logger.warning("Cache delete error for %s: %s", key, result.error)

    # -- lookup -----------------------------------------------------------

    def fetch_data(self, url: str | None, key: str | None = None) -> Any | None:
        """Return a resource from the cheapest available source.

        Order: in-memory map, disk, network. A network hit is written back
        to memory and disk.

        Args:
            url: Remote URL of the resource. None restricts the lookup to
                memory and disk.
            key: Logical cache key. Defaults to the URL.

        Returns:
            The resource value, or None when it is not cached and either the
            cache is offline or no URL was given.

        Raises:
            RemoteFetchError: If the cache is online and the fetch fails.
            ValueError: If neither url nor key is given.
        """
        cache_key = key or url
        if not cache_key:
            raise ValueError("fetch_data() needs a url or a key")

        found, value = self._recall(cache_key)
        if found:
            self._count(hits=1)
            logger.debug("Memory hit: %s", cache_key)
            return value

        found, value = self._read_disk(cache_key)
        if found:
            self.remember(cache_key, value)
            self._count(hits=1)
            logger.debug("Disk hit: %s", cache_key)
            return value

        if url is None:
            return None

        if not self._online:
            self._count(misses=1)
            logger.warning("No cached data for %s and offline", cache_key)
            return None

        result = self._gateway.fetch_json(url)
        if not result.success:
            self._count(errors=1)
            raise RemoteFetchError(url, result.error or "unknown error")

        self.remember(cache_key, result.data)
        self.cache_data(cache_key, result.data)
        self._count(misses=1)
        logger.debug("Fetched: %s", cache_key)
        return result.data

    # -- resource helpers -------------------------------------------------

    def url_for(self, *segments: str | int) -> str:
        """Build an API URL from path segments."""
        return "/".join([self.base_url, *(str(s) for s in segments)])

    def get_list(self, limit: int, offset: int = 0) -> Any | None:
        url = f"{self.url_for(self.collection)}?limit={limit}&offset={offset}"
        return self.fetch_data(url, keys.list_key(self.collection, limit, offset))

    def get_detail(self, id_or_name: str | int) -> Any | None:
        return self.fetch_data(
            self.url_for(self.collection, id_or_name),
            keys.detail_key(self.collection, id_or_name),
        )

    def get_species(self, id_or_name: str | int) -> Any | None:
        return self.fetch_data(
            self.url_for(f"{self.collection}-species", id_or_name),
            keys.species_key(id_or_name),
        )

    def get_encounters(self, record_id: str | int) -> Any | None:
        return self.fetch_data(
            self.url_for(self.collection, record_id, "encounters"),
            keys.encounters_key(record_id),
        )

    def get_evolution_chain(self, chain_id: str | int) -> Any | None:
        return self.fetch_data(
            self.url_for("evolution-chain", chain_id), keys.evolution_key(chain_id)
        )

    def get_move(self, id_or_name: str | int) -> Any | None:
        return self.fetch_data(self.url_for("move", id_or_name), f"move_{id_or_name}")

    def get_type(self, id_or_name: str | int) -> Any | None:
        return self.fetch_data(self.url_for("type", id_or_name), f"type_{id_or_name}")

    def get_location(self, id_or_name: str | int) -> Any | None:
        return self.fetch_data(
            self.url_for("location", id_or_name), f"location_{id_or_name}"
        )

    def get_location_area(self, id_or_name: str | int) -> Any | None:
        return self.fetch_data(
            self.url_for("location-area", id_or_name), f"location_area_{id_or_name}"
        )
