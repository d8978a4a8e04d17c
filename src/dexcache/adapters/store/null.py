"""Blob store for running without persistent storage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dexcache.core.models import DomainStats, StoreResult, parse_clear_target


if TYPE_CHECKING:
    from pathlib import Path

    from dexcache.core.models import CacheDomain, ClearTarget


class NullBlobStore:
    """A BlobStorePort that stores nothing.

    Selected once at startup for pure-network operation: every read misses,
    writes are discarded, and statistics are zero. The in-memory map of the
    data cache still works on top of it.
    """

    def put(self, domain: CacheDomain, filename: str, content: Any) -> StoreResult:  # noqa: ARG002
        return StoreResult.ok()

    def get(self, domain: CacheDomain, filename: str) -> StoreResult:  # noqa: ARG002
        return StoreResult.miss()

    def exists(self, domain: CacheDomain, filename: str) -> bool:  # noqa: ARG002
        return False

    def locate(self, domain: CacheDomain, filename: str) -> Path | None:  # noqa: ARG002
        return None

    def delete(self, domain: CacheDomain, filename: str) -> StoreResult:  # noqa: ARG002
        return StoreResult.ok()

    def list_filenames(self, domain: CacheDomain, prefix: str = "") -> list[str]:  # noqa: ARG002
        return []

    def stat(self, domain: CacheDomain) -> DomainStats:  # noqa: ARG002
        return DomainStats()

    def clear(self, target: ClearTarget) -> StoreResult:
        parse_clear_target(target)
        return StoreResult.ok()
