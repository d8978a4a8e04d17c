"""Sprite and audio caches over the binary blob store domains."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from dexcache.core.keys import media_filename


if TYPE_CHECKING:
    from pathlib import Path

    from dexcache.core.failures import FailureLog
    from dexcache.core.models import CacheDomain
    from dexcache.core.ports import BlobStorePort, GatewayPort


logger = logging.getLogger(__name__)

SHOWDOWN_BASE_URL = (
    "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/other/showdown"
)
CRIES_BASE_URL = "https://raw.githubusercontent.com/PokeAPI/cries/main/cries/pokemon/latest"


@dataclass(frozen=True, slots=True)
class SpriteOptions:
    """Which sprite variant to show.

    Attributes:
        shiny: Use the shiny palette.
        animated: Prefer animated sprites.
        force_official: Use the official sprite fields of the record instead
            of the Showdown GIFs.
    """

    shiny: bool = False
    animated: bool = False
    force_official: bool = False

    @property
    def uses_showdown(self) -> bool:
        return not self.force_official


def _animated_sprite(record: dict[str, Any], field: str) -> str | None:
    versions = (record.get("sprites") or {}).get("versions") or {}
    black_white = (versions.get("generation-v") or {}).get("black-white") or {}
    return (black_white.get("animated") or {}).get(field)


def sprite_url(record: dict[str, Any], options: SpriteOptions | None = None) -> str | None:
    """Remote URL of a record's sprite for the given options."""
    options = options or SpriteOptions()
    if options.uses_showdown:
        shiny = "shiny/" if options.shiny else ""
        return f"{SHOWDOWN_BASE_URL}/{shiny}{record['id']}.gif"

    sprites = record.get("sprites") or {}
    field = "front_shiny" if options.shiny else "front_default"
    if options.animated:
        animated = _animated_sprite(record, field)
        if animated:
            return animated
    return sprites.get(field) or sprites.get("front_default")


def sprite_filename(record: dict[str, Any], options: SpriteOptions | None = None) -> str:
    """Local filename of a sprite variant, e.g. ``025_pikachu_shiny_showdown.gif``."""
    options = options or SpriteOptions()
    parts = [f"{int(record['id']):03d}", str(record["name"]).lower()]
    if options.shiny:
        parts.append("shiny")
    if options.animated:
        parts.append("animated")
    if options.uses_showdown:
        parts.append("showdown")
    return media_filename("_".join(parts), "gif" if options.uses_showdown else "png")


def cry_url(record_id: int | str) -> str:
    return f"{CRIES_BASE_URL}/{record_id}.ogg"


def cry_filename(record_id: int | str) -> str:
    return media_filename(f"cry_{record_id}", "ogg")


class MediaCache:
    """Download-once cache for binary media in one domain.

    load() resolves to a local file path when the media is (or can be) on
    disk and to the remote URL otherwise, so the caller always has
    something to display or play.

    Args:
        store: Blob store holding the files.
        gateway: Gateway used for downloads.
        domain: CacheDomain.SPRITES or CacheDomain.AUDIO.
        failures: Failure log for downloads that did not stick.
    """

    def __init__(
        self,
        store: BlobStorePort,
        gateway: GatewayPort,
        domain: CacheDomain,
        *,
        failures: FailureLog | None = None,
    ) -> None:
        if not domain.is_binary:
            raise ValueError(f"MediaCache needs a binary domain, got '{domain}'")
        self._store = store
        self._gateway = gateway
        self.domain = domain
        self._failures = failures
        self._memory: dict[str, str] = {}
        self._lock = threading.Lock()

    @property
    def kind(self) -> str:
        """Failure kind for this domain ("sprite" or "audio")."""
        return "sprite" if self.domain.value == "sprites" else "audio"

    def cached_path(self, filename: str) -> Path | None:
        return self._store.locate(self.domain, filename)

    def load(self, url: str, filename: str) -> str:
        """Return a local path for the media, downloading it on first use.

        Args:
            url: Remote URL of the media.
            filename: Sanitized local filename.

        Returns:
            Local file path, or the remote URL when the media could not be
            stored locally. Failed downloads are not remembered, so the next
            call tries again.
        """
        with self._lock:
            if filename in self._memory:
                return self._memory[filename]

        local = self.cached_path(filename)
        if local is not None:
            return self._remember(filename, str(local))

        location = self._download(url, filename)
        return url if location is None else location

    def retry_failed(self, item_id: str | None = None) -> list[str]:
        """Download failed media of this domain again.

        Args:
            item_id: Retry only this filename; None retries all.

        Returns:
            Locations of the media that were recovered.
        """
        if self._failures is None:
            return []
        recovered = []
        for entry in self._failures.entries(self.kind):
            if entry.url is None or item_id not in (None, entry.item_id):
                continue
            local = self.cached_path(entry.item_id)
            if local is not None:
                self._failures.resolve(entry.item_id, self.kind)
                recovered.append(self._remember(entry.item_id, str(local)))
                continue
            location = self._download(entry.url, entry.item_id)
            if location is not None:
                recovered.append(location)
        return recovered

    def _download(self, url: str, filename: str) -> str | None:
        """Fetch and store one file; None when it failed (and was recorded)."""
        result = self._gateway.fetch_binary(url)
        if not result.success:
            logger.warning("Could not download %s: %s", url, result.error)
            self._record_failure(filename, url, result.error or "download failed")
            return None

        stored = self._store.put(self.domain, filename, result.data)
        if not stored.success:
            logger.warning("Could not cache %s: %s", filename, stored.error)
            self._record_failure(filename, url, stored.error or "write failed")
            return None

        if self._failures is not None:
            self._failures.resolve(filename, self.kind)
        # None when the store keeps nothing on disk
        local = self.cached_path(filename)
        return self._remember(filename, url if local is None else str(local))

    def _remember(self, filename: str, location: str) -> str:
        with self._lock:
            self._memory[filename] = location
        return location

    def _record_failure(self, filename: str, url: str, error: str) -> None:
        if self._failures is not None:
            self._failures.record(filename, self.kind, error, url=url)

    def clear_memory(self) -> None:
        """Forget resolved locations (after the domain was cleared on disk)."""
        with self._lock:
            self._memory.clear()
