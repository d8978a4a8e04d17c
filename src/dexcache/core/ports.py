"""Port interfaces for hexagonal architecture.

Ports define contracts that adapters must implement. The core domain
depends only on these protocols, never on concrete implementations.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable


if TYPE_CHECKING:
    from concurrent.futures import Future
    from pathlib import Path

    from dexcache.core.models import (
        CacheDomain,
        ClearTarget,
        DomainStats,
        FetchResult,
        StoreResult,
    )

ProgressCallback = Callable[[int, int, str], None]


@runtime_checkable
class BlobStorePort(Protocol):
    """Persistent key/file mapping, namespaced by cache domain.

    Filenames are already sanitized by the caller. Reads and writes report
    filesystem errors through StoreResult instead of raising.
    """

    def put(self, domain: CacheDomain, filename: str, content: Any) -> StoreResult:
        """Write JSON (data domain) or bytes (binary domains), overwriting."""
        ...

    def get(self, domain: CacheDomain, filename: str) -> StoreResult:
        """Read an entry.

        Returns:
            StoreResult.hit(value), StoreResult.miss() when absent, or
            StoreResult.failure(message) on a filesystem error.

        Raises:
            CacheCorruptError: If a data-domain file is not valid JSON.
        """
        ...

    def exists(self, domain: CacheDomain, filename: str) -> bool:
        """Check whether an entry exists."""
        ...

    def locate(self, domain: CacheDomain, filename: str) -> Path | None:
        """Return the local path of an existing entry, or None."""
        ...

    def delete(self, domain: CacheDomain, filename: str) -> StoreResult:
        """Remove one entry. A missing entry is not an error."""
        ...

    def list_filenames(self, domain: CacheDomain, prefix: str = "") -> list[str]:
        """List entry filenames in a domain, sorted, filtered by prefix."""
        ...

    def stat(self, domain: CacheDomain) -> DomainStats:
        """Count regular files and sum their sizes (one level deep)."""
        ...

    def clear(self, target: ClearTarget) -> StoreResult:
        """Remove a domain directory, or all three for "all"."""
        ...


@runtime_checkable
class GatewayPort(Protocol):
    """Outbound HTTP transport. No caching and no retries at this layer."""

    def fetch_json(self, url: str) -> FetchResult:
        """GET a URL and decode the body as JSON."""
        ...

    def fetch_binary(self, url: str) -> FetchResult:
        """GET a URL and return the raw body bytes."""
        ...

    def probe(self, url: str, timeout: float) -> bool:
        """Return True if the URL answers with 2xx within timeout seconds."""
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Reports bulk load progress to the user.

    The core domain uses this to report progress without depending
    on any specific UI library.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Start tracking a task.

        Args:
            name: Human-readable name for the task.
            total: Number of items to process.

        Returns:
            A ProgressCallback to call with (completed, total, current_label).
        """
        ...

    def finish_task(self, name: str) -> None:
        """Mark a task as complete.

        Args:
            name: The task name passed to start_task().
        """
        ...


class NullProgressReporter:
    """A ProgressReporter that produces no output.

    Used as the default when no progress reporting is desired.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:  # noqa: ARG002
        """Return a no-op callback."""
        return lambda _completed, _total, _label: None

    def finish_task(self, name: str) -> None:
        """Do nothing."""
        _ = name  # Unused but required by protocol


@runtime_checkable
class ExecutorPort(Protocol):
    """Executor for concurrent fan-out within one batch.

    Abstracts over concurrent.futures executors to allow dependency injection
    and testing. The core domain uses this protocol instead of directly
    importing ThreadPoolExecutor.
    """

    def submit(
        self, fn: Callable[..., object], *args: object, **kwargs: object
    ) -> Future[object]:  # type: ignore[name-defined, unused-ignore]
        """Submit a function for execution and return its Future."""
        ...

    def shutdown(self) -> None:
        """Release worker resources."""
        ...
