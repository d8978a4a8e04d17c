"""In-memory list of downloads that failed and may be retried."""

from __future__ import annotations

import threading

from dexcache.core.models import FailureRecord


class FailureLog:
    """Ordered, thread-safe list of FailureRecord entries.

    One entry per (kind, item_id); recording the same item again replaces
    the earlier entry. Not persisted across restarts.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], FailureRecord] = {}
        self._lock = threading.Lock()

    def record(
        self, item_id: str, kind: str, error: str, url: str | None = None
    ) -> FailureRecord:
        """Append a failure, replacing any previous one for the same item."""
        entry = FailureRecord(
            item_id=item_id, kind=kind, error=error or "unknown error", url=url
        )
        with self._lock:
            self._records.pop((kind, item_id), None)
            self._records[(kind, item_id)] = entry
        return entry

    def resolve(self, item_id: str, kind: str) -> bool:
        """Remove an item after a successful retry.

        Returns:
            True if the item was in the log.
        """
        with self._lock:
            return self._records.pop((kind, item_id), None) is not None

    def clear(self) -> int:
        """Empty the log and return how many entries were dropped."""
        with self._lock:
            count = len(self._records)
            self._records.clear()
        return count

    def entries(self, kind: str | None = None) -> list[FailureRecord]:
        """Entries in insertion order, optionally filtered by kind."""
        with self._lock:
            records = list(self._records.values())
        if kind is None:
            return records
        return [r for r in records if r.kind == kind]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, item_id: object) -> bool:
        with self._lock:
            return any(r.item_id == item_id for r in self._records.values())
