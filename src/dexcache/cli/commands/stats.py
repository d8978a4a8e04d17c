"""Stats command for CLI."""

from __future__ import annotations

import json

import typer
from rich.console import Console

from dexcache.cli.formatting import _stats_table
from dexcache.cli.main import app, load_dex_context


@app.command()
def stats(
    ctx: typer.Context,
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the statistics as JSON.",
    ),
) -> None:
    """Show file counts and sizes per cache, plus hit/miss counters."""
    with load_dex_context(ctx, probe_on_start=False) as dex:
        cache_stats = dex.get_stats()

    if as_json:
        typer.echo(json.dumps(cache_stats.to_dict(), indent=2))
        return

    # Force terminal output so the table renders the same everywhere
    console = Console(force_terminal=True)
    console.print(_stats_table(cache_stats))
    counters = cache_stats.performance
    typer.echo(f"Hits: {counters.hits}  Misses: {counters.misses}  Errors: {counters.errors}")
