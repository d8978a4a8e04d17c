"""Shared formatting helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from dexcache.core.formatting import (
    connectivity_to_color,
    failure_kind_to_color,
    format_bytes,
)


if TYPE_CHECKING:
    from dexcache.core.models import CacheStats, FailureRecord


def _format_connectivity(online: bool) -> Text:
    """Format connectivity state with color coding.

    Returns:
        Rich Text "online" in green or "offline" in red.
    """
    return Text("online" if online else "offline", style=connectivity_to_color(online))


def _stats_table(stats: CacheStats) -> Table:
    """Build the per-domain files/size table, with a total row."""
    table = Table()
    table.add_column("Cache")
    table.add_column("Files", justify="right")
    table.add_column("Size", justify="right")

    rows = stats.to_dict()
    for name in ("data", "sprites", "audio"):
        table.add_row(name, str(rows[name]["files"]), format_bytes(rows[name]["size"]))
    table.add_section()
    total = rows["total"]
    table.add_row(Text("total", style="bold"), str(total["files"]), format_bytes(total["size"]))
    return table


def _failures_table(failures: list[FailureRecord]) -> Table:
    """Build a table of failed items, oldest first."""
    table = Table()
    table.add_column("Kind")
    table.add_column("Item")
    table.add_column("Error")
    table.add_column("When")

    for failure in sorted(failures, key=lambda f: f.timestamp):
        color = failure_kind_to_color(failure.kind)
        kind = Text(failure.kind, style=color) if color else Text(failure.kind)
        table.add_row(
            kind,
            failure.item_id,
            failure.error,
            failure.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        )
    return table


def _names(entries: list[dict[str, Any]], field: str) -> str:
    names = [e[field]["name"] for e in entries if isinstance(e.get(field), dict)]
    return ", ".join(names) if names else "-"


def _record_summary(record: dict[str, Any]) -> list[str]:
    """Lines describing a complete record for terminal output."""
    lines = [f"#{record.get('id', 0):04d} {record.get('name', '?')}"]
    lines.append(f"  Types: {_names(record.get('types') or [], 'type')}")
    if "height" in record and "weight" in record:
        lines.append(f"  Height: {record['height'] / 10:.1f} m")
        lines.append(f"  Weight: {record['weight'] / 10:.1f} kg")
    if record.get("description"):
        lines.append(f"  Description: {record['description']}")
    species = record.get("species")
    if species is None:
        lines.append("  Species: unavailable")
    elif species.get("genera"):
        genus = next(
            (g["genus"] for g in species["genera"] if g.get("language", {}).get("name") == "en"),
            None,
        )
        if genus:
            lines.append(f"  Genus: {genus}")
    lines.append(f"  Encounter locations: {len(record.get('encounters') or [])}")
    chain = record.get("evolution_chain")
    lines.append(f"  Evolution chain: {'#' + str(chain['id']) if chain and 'id' in chain else 'unavailable'}")
    return lines
