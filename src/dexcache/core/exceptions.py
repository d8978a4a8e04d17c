"""Domain exceptions for dexcache.

All library errors inherit from DexcacheError, allowing callers to catch
any library exception with a single except clause. Each exception provides
a recovery_hint property with guidance on resolving the error.

Expected conditions (cache miss, offline without data for one key) are not
exceptions; they are reported through return values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path


class DexcacheError(Exception):
    """Base class for all dexcache exceptions.

    Catch this to handle any error from the library.
    """

    @property
    def recovery_hint(self) -> str | None:
        """Optional guidance on how to resolve this error."""
        return None


class CacheError(DexcacheError):
    """Base class for cache-related errors."""

    pass


class CacheCorruptError(CacheError):
    """Raised when a cached JSON file exists but cannot be decoded.

    Attributes:
        key: The filename of the corrupt entry.
        path: The path to the corrupt file.
        cause: The underlying decode error.
    """

    def __init__(
        self,
        message: str,
        key: str,
        path: Path,
        cause: Exception | None = None,
    ) -> None:
        self.key = key
        self.path = path
        self.cause = cause
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest deleting the corrupt cache entry."""
        return f"Delete '{self.path.name}' or run 'dexcache clear data' and re-fetch"


class InvalidDomainError(CacheError):
    """Raised when a cache domain name is not recognised.

    Attributes:
        value: The rejected domain name.
    """

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid cache type '{value}'")

    @property
    def recovery_hint(self) -> str:
        """List the accepted names."""
        return "Use one of: data, sprites, audio, all"


class RemoteFetchError(DexcacheError):
    """Raised when a network fetch fails while the cache believes it is online.

    Attributes:
        url: The URL that failed.
        reason: Transport-level failure description.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"API request failed: {reason}")

    @property
    def recovery_hint(self) -> str:
        """Suggest checking connectivity."""
        return "Run 'dexcache check' to verify connectivity, then retry"


class AggregationError(DexcacheError):
    """Raised inside a bulk load when the collection cannot be assembled.

    The aggregator catches it and falls back to rebuilding from disk.
    """

    pass


class NoCachedDataError(DexcacheError):
    """Raised when a bulk load fails and nothing can be rebuilt from disk.

    This is the only outward failure of a bulk load.

    Attributes:
        offline: Whether the cache was offline when the load failed.
        cause: The error that aborted the load, if any.
    """

    def __init__(self, offline: bool, cause: Exception | None = None) -> None:
        self.offline = offline
        self.cause = cause
        if offline:
            message = "No internet connection and no cached data available"
        else:
            message = "Records could not be loaded and no cached data is available"
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest reconnecting before loading."""
        if self.offline:
            return "Connect to the internet and run 'dexcache load' once to seed the cache"
        return "Retry 'dexcache load'; the remote API may be temporarily unavailable"


class ConfigurationError(DexcacheError):
    """Raised for configuration problems (invalid settings or overrides)."""

    pass
