"""Disk-backed blob store implementing BlobStorePort."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

from dexcache.core.exceptions import CacheCorruptError
from dexcache.core.models import (
    ALL_DOMAINS,
    CacheDomain,
    ClearTarget,
    DomainStats,
    StoreResult,
    parse_clear_target,
)


logger = logging.getLogger(__name__)


class FileBlobStore:
    """Flat per-domain directories of files under one data root.

    Layout::

        <root>/cache/<sanitized key>.json
        <root>/sprites/<filename>
        <root>/audio/<filename>

    The directory listing is the index; there is no metadata file.

    Attributes:
        root: Per-user application data directory.
    """

    def __init__(self, root: Path) -> None:
        """Initialize the store. Directories are created on first write.

        Args:
            root: Directory under which the domain directories live.
        """
        self.root = root

    def domain_dir(self, domain: CacheDomain) -> Path:
        """Get the directory of a domain."""
        return self.root / domain.directory

    def _file_path(self, domain: CacheDomain, filename: str) -> Path:
        return self.domain_dir(domain) / filename

    def _json_marker(self, domain: CacheDomain, filename: str) -> Path:
        """Sidecar flagging a binary-domain entry that holds JSON."""
        return self.domain_dir(domain) / f".{filename}.json"

    @staticmethod
    def _write_atomic(path: Path, payload: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            tmp_path.replace(path)
        finally:
            tmp_path.unlink(missing_ok=True)

    def put(self, domain: CacheDomain, filename: str, content: Any) -> StoreResult:
        """Write an entry, replacing any previous content.

        Bytes-like content in a binary domain is written as-is; every other
        value is serialized as JSON. A JSON value in a binary domain gets a
        hidden ``.<filename>.json`` marker so get() decodes it again. The
        content goes to a temporary sibling first and is moved into place.

        Args:
            domain: Target domain.
            filename: Sanitized filename.
            content: JSON-serializable value or bytes.

        Returns:
            StoreResult.ok(), or StoreResult.failure() on a filesystem or
            serialization error.
        """
        path = self._file_path(domain, filename)
        raw = domain.is_binary and isinstance(content, bytes | bytearray | memoryview)
        try:
            payload = bytes(content) if raw else json.dumps(content).encode("utf-8")
        except (TypeError, ValueError) as e:
            return StoreResult.failure(f"Cannot serialize '{filename}': {e}")

        marker = self._json_marker(domain, filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(path, payload)
            if domain.is_binary and not raw:
                self._write_atomic(marker, b'{"encoding": "json"}')
            elif domain.is_binary:
                marker.unlink(missing_ok=True)
        except OSError as e:
            logger.debug("Write failed for %s: %s", path, e)
            return StoreResult.failure(str(e))
        return StoreResult.ok()

    def get(self, domain: CacheDomain, filename: str) -> StoreResult:
        """Read an entry.

        Args:
            domain: Domain to read from.
            filename: Sanitized filename.

        Returns:
            hit with the decoded value, miss when absent, failure on OSError.

        Raises:
            CacheCorruptError: If an entry written as JSON no longer parses.
        """
        path = self._file_path(domain, filename)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return StoreResult.miss()
        except OSError as e:
            return StoreResult.failure(str(e))

        if domain.is_binary and not self._json_marker(domain, filename).is_file():
            return StoreResult.hit(raw)

        try:
            return StoreResult.hit(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CacheCorruptError(
                f"Cached data corrupt for '{filename}'",
                key=filename,
                path=path,
                cause=e,
            ) from e

    def exists(self, domain: CacheDomain, filename: str) -> bool:
        return self._file_path(domain, filename).is_file()

    def locate(self, domain: CacheDomain, filename: str) -> Path | None:
        path = self._file_path(domain, filename)
        return path if path.is_file() else None

    def delete(self, domain: CacheDomain, filename: str) -> StoreResult:
        try:
            self._file_path(domain, filename).unlink(missing_ok=True)
            self._json_marker(domain, filename).unlink(missing_ok=True)
        except OSError as e:
            return StoreResult.failure(str(e))
        return StoreResult.ok()

    def list_filenames(self, domain: CacheDomain, prefix: str = "") -> list[str]:
        """List regular files of a domain whose names start with prefix.

        Hidden files (write temporaries and JSON markers) are skipped.
        """
        directory = self.domain_dir(domain)
        if not directory.is_dir():
            return []
        names = []
        for entry in directory.iterdir():
            if entry.name.startswith(".") or not entry.name.startswith(prefix):
                continue
            if entry.is_file():
                names.append(entry.name)
        return sorted(names)

    def stat(self, domain: CacheDomain) -> DomainStats:
        """Count regular files in a domain directory and sum their sizes.

        Only the top level is enumerated; subdirectories and hidden files
        are ignored, matching list_filenames().
        """
        directory = self.domain_dir(domain)
        if not directory.is_dir():
            return DomainStats()

        files = 0
        size = 0
        for entry in directory.iterdir():
            if entry.name.startswith(".") or not entry.is_file():
                continue
            with contextlib.suppress(OSError):
                size += entry.stat().st_size
                files += 1
        return DomainStats(files=files, size=size)

    def clear(self, target: ClearTarget) -> StoreResult:
        """Remove a domain directory, or every domain directory for "all".

        Args:
            target: A CacheDomain, its name, or "all".

        Returns:
            StoreResult.ok(), or a failure if a directory could not be removed.

        Raises:
            InvalidDomainError: If target is not a domain or "all".
        """
        resolved = parse_clear_target(target)
        domains = list(CacheDomain) if resolved == ALL_DOMAINS else [resolved]

        for domain in domains:
            directory = self.domain_dir(domain)
            if not directory.exists():
                continue
            try:
                shutil.rmtree(directory)
            except OSError as e:
                return StoreResult.failure(f"Could not clear {domain}: {e}")
            logger.info("Cleared %s cache at %s", domain, directory)
        return StoreResult.ok()
