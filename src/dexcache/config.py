"""Configuration for dexcache.

Settings come from DexConfig defaults, then DEXCACHE_* environment
variables, then explicit overrides (CLI options).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir

from dexcache.core.exceptions import ConfigurationError


APP_NAME = "dexcache"


def default_data_root() -> Path:
    """Per-user application data directory (platform specific)."""
    return Path(user_data_dir(APP_NAME, appauthor=False))


@dataclass(frozen=True, slots=True)
class DexConfig:
    """Runtime settings.

    Attributes:
        data_root: Directory holding the cache, sprites and audio folders.
        base_url: Root of the remote REST API.
        collection: Collection endpoint name.
        max_records: Default number of list entries for a bulk load.
        batch_size: Items fetched concurrently per batch.
        batch_delay: Seconds between batches.
        request_timeout: Per-request timeout in seconds (None waits forever).
        probe_timeout: Connectivity probe timeout in seconds.
        probe_url: URL probed for connectivity; derived from base_url if None.
        reconstruct_ceiling: Highest id accepted when rebuilding from disk.
        persistent: Use the disk store; False runs network-only.
        online: Initial connectivity state.
        probe_on_start: Probe connectivity when the service is built.
    """

    data_root: Path = field(default_factory=default_data_root)
    base_url: str = "https://pokeapi.co/api/v2"
    collection: str = "pokemon"
    max_records: int = 1302
    batch_size: int = 5
    batch_delay: float = 0.1
    request_timeout: float | None = 30.0
    probe_timeout: float = 5.0
    probe_url: str | None = None
    reconstruct_ceiling: int = 1302
    persistent: bool = True
    online: bool = True
    probe_on_start: bool = True

    def __post_init__(self) -> None:
        """Validate numeric settings."""
        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be at least 1")
        if self.max_records < 1:
            raise ConfigurationError("max_records must be at least 1")
        if self.batch_delay < 0:
            raise ConfigurationError("batch_delay cannot be negative")
        if self.probe_timeout <= 0:
            raise ConfigurationError("probe_timeout must be positive")
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")
        if not self.base_url:
            raise ConfigurationError("base_url cannot be empty")

    @property
    def resolved_probe_url(self) -> str:
        return self.probe_url or f"{self.base_url.rstrip('/')}/{self.collection}/1"


def _number(env: Mapping[str, str], name: str, kind: type[int] | type[float]) -> Any:
    raw = env.get(name)
    if raw is None or raw == "":
        return None
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from None


def _flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def load_config(env: Mapping[str, str] | None = None, **overrides: Any) -> DexConfig:
    """Build a DexConfig from the environment and explicit overrides.

    Recognised variables: DEXCACHE_HOME, DEXCACHE_BASE_URL,
    DEXCACHE_BATCH_SIZE, DEXCACHE_BATCH_DELAY, DEXCACHE_REQUEST_TIMEOUT,
    DEXCACHE_PROBE_TIMEOUT, DEXCACHE_OFFLINE, DEXCACHE_NO_DISK.

    Args:
        env: Environment mapping (defaults to os.environ).
        **overrides: DexConfig fields; None values are ignored.

    Returns:
        The validated configuration.

    Raises:
        ConfigurationError: If a value is not a number or out of range.
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {}

    if env.get("DEXCACHE_HOME"):
        values["data_root"] = Path(env["DEXCACHE_HOME"]).expanduser()
    if env.get("DEXCACHE_BASE_URL"):
        values["base_url"] = env["DEXCACHE_BASE_URL"]
    for name, key, kind in (
        ("DEXCACHE_BATCH_SIZE", "batch_size", int),
        ("DEXCACHE_BATCH_DELAY", "batch_delay", float),
        ("DEXCACHE_REQUEST_TIMEOUT", "request_timeout", float),
        ("DEXCACHE_PROBE_TIMEOUT", "probe_timeout", float),
    ):
        number = _number(env, name, kind)
        if number is not None:
            values[key] = number
    if _flag(env, "DEXCACHE_OFFLINE"):
        values["online"] = False
        values["probe_on_start"] = False
    if _flag(env, "DEXCACHE_NO_DISK"):
        values["persistent"] = False

    values.update({k: v for k, v in overrides.items() if v is not None})
    if "data_root" in values:
        values["data_root"] = Path(values["data_root"])
    try:
        return DexConfig(**values)
    except TypeError as e:
        raise ConfigurationError(f"Unknown setting: {e}") from None
