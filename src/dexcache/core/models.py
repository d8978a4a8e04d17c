"""Core domain models for dexcache.

These models are pure Python dataclasses with no I/O dependencies.
They represent the cache domains, the structured results returned by
the blob store and the gateway, statistics, and failure records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Literal

from dexcache.core.exceptions import InvalidDomainError


ALL_DOMAINS: Literal["all"] = "all"


class CacheDomain(StrEnum):
    """One of the three independent storage namespaces.

    Domains never share directories; clearing one never touches another.
    """

    DATA = "data"
    SPRITES = "sprites"
    AUDIO = "audio"

    @property
    def directory(self) -> str:
        """Name of the subdirectory under the data root."""
        return _DIRECTORIES[self]

    @property
    def is_binary(self) -> bool:
        """True for domains that hold raw bytes instead of JSON."""
        return self is not CacheDomain.DATA

    @classmethod
    def parse(cls, value: str | CacheDomain) -> CacheDomain:
        """Resolve a domain from its name.

        Args:
            value: A CacheDomain or its string value ("data", "sprites", "audio").

        Returns:
            The matching CacheDomain.

        Raises:
            InvalidDomainError: If the name is not a domain.
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidDomainError(str(value)) from None


_DIRECTORIES = {
    CacheDomain.DATA: "cache",
    CacheDomain.SPRITES: "sprites",
    CacheDomain.AUDIO: "audio",
}

ClearTarget = CacheDomain | Literal["all"]


def parse_clear_target(value: str | CacheDomain) -> ClearTarget:
    """Resolve a clear target, accepting "all" in addition to domain names."""
    if value == ALL_DOMAINS:
        return ALL_DOMAINS
    return CacheDomain.parse(value)


@dataclass(frozen=True, slots=True)
class StoreResult:
    """Outcome of a blob store operation.

    A miss is a successful lookup that found nothing; a failure carries
    the error message of a filesystem problem.

    Attributes:
        success: False when the operation hit a filesystem error.
        found: True when a read located the entry.
        value: Decoded JSON (data domain) or bytes (binary domains).
        error: Error message for failures.
    """

    success: bool
    found: bool = False
    value: Any = None
    error: str | None = None

    @classmethod
    def hit(cls, value: Any) -> StoreResult:
        return cls(success=True, found=True, value=value)

    @classmethod
    def miss(cls) -> StoreResult:
        return cls(success=True, found=False)

    @classmethod
    def ok(cls) -> StoreResult:
        return cls(success=True)

    @classmethod
    def failure(cls, message: str) -> StoreResult:
        return cls(success=False, error=message)


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of a gateway request.

    Attributes:
        success: True for a 2xx response with a decodable body.
        data: Parsed JSON or raw bytes.
        error: Failure reason (transport error, HTTP status, bad JSON).
        status_code: HTTP status when a response was received.
    """

    success: bool
    data: Any = None
    error: str | None = None
    status_code: int | None = None

    @classmethod
    def ok(cls, data: Any, status_code: int = 200) -> FetchResult:
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def failure(cls, error: str, status_code: int | None = None) -> FetchResult:
        return cls(success=False, error=error, status_code=status_code)


@dataclass(frozen=True, slots=True)
class DomainStats:
    """File count and total byte size of one domain directory."""

    files: int = 0
    size: int = 0

    def __add__(self, other: DomainStats) -> DomainStats:
        return DomainStats(files=self.files + other.files, size=self.size + other.size)

    def to_dict(self) -> dict[str, int]:
        return {"files": self.files, "size": self.size}


@dataclass(frozen=True, slots=True)
class CacheCounters:
    """Process-lifetime hit/miss/error counters of the data cache."""

    hits: int = 0
    misses: int = 0
    errors: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "errors": self.errors}


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Aggregated statistics for all three domains plus performance counters.

    Attributes:
        data: Stats for the JSON data domain.
        sprites: Stats for the sprite image domain.
        audio: Stats for the audio clip domain.
        performance: Counters from the data cache facade.
    """

    data: DomainStats = field(default_factory=DomainStats)
    sprites: DomainStats = field(default_factory=DomainStats)
    audio: DomainStats = field(default_factory=DomainStats)
    performance: CacheCounters = field(default_factory=CacheCounters)

    @property
    def total(self) -> DomainStats:
        """Sum of the three domains."""
        return self.data + self.sprites + self.audio

    def for_domain(self, domain: CacheDomain) -> DomainStats:
        return {
            CacheDomain.DATA: self.data,
            CacheDomain.SPRITES: self.sprites,
            CacheDomain.AUDIO: self.audio,
        }[domain]

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Return the nested dict shape consumed by the presentation layer."""
        return {
            "data": self.data.to_dict(),
            "sprites": self.sprites.to_dict(),
            "audio": self.audio.to_dict(),
            "total": self.total.to_dict(),
            "performance": self.performance.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class FailureRecord:
    """A unit of work that could not be downloaded.

    Attributes:
        item_id: Record name/id, or media filename.
        kind: "record", "sprite" or "audio".
        error: Error message; never empty.
        timestamp: When the failure was recorded (UTC).
        url: Source URL for media failures, so they can be downloaded again.
    """

    item_id: str
    kind: str
    error: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    url: str | None = None

    def __post_init__(self) -> None:
        if not self.item_id:
            raise ValueError("FailureRecord item_id cannot be empty")
        if not self.error:
            raise ValueError("FailureRecord error cannot be empty")
