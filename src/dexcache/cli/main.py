"""CLI commands for dexcache."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from dexcache.core.exceptions import DexcacheError


if TYPE_CHECKING:
    from dexcache import Dex, DexConfig


app = typer.Typer(
    name="dexcache",
    help="Offline-capable local cache for the PokéAPI REST API.",
    no_args_is_help=True,
)


def configure_logging(verbose: bool = False) -> None:
    """Route dexcache log records to stderr through Rich.

    Args:
        verbose: Show DEBUG records; otherwise WARNING and above.
    """
    package_logger = logging.getLogger("dexcache")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


@app.callback()
def main_callback(
    ctx: typer.Context,
    home: Path | None = typer.Option(
        None,
        "--home",
        help="Data root holding the cache, sprites and audio folders.",
        envvar="DEXCACHE_HOME",
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Start offline: serve only what is cached, never touch the network.",
    ),
    no_disk: bool = typer.Option(
        False,
        "--no-disk",
        help="Run without the disk cache (network only, nothing persisted).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging.",
    ),
) -> None:
    """Offline-capable local cache for the PokéAPI REST API."""
    configure_logging(verbose)
    ctx.obj = {
        "data_root": home,
        "online": False if offline else None,
        "probe_on_start": False if offline else None,
        "persistent": False if no_disk else None,
    }


def _fail(error: DexcacheError) -> typer.Exit:
    """Print an error and its hint to stderr and return the exit to raise."""
    typer.echo(f"Error: {error}", err=True)
    if error.recovery_hint:
        typer.echo(f"Hint: {error.recovery_hint}", err=True)
    return typer.Exit(1)


def build_dex(config: DexConfig) -> Dex:
    """Build the service for a configuration (replaced in tests)."""
    from dexcache import Dex

    return Dex.from_config(config)


def load_dex_context(ctx: typer.Context, **overrides: Any) -> Dex:
    """Load the service for CLI commands.

    Args:
        ctx: Typer context holding the global options.
        **overrides: Extra DexConfig fields from the command's own options.

    Returns:
        A Dex built from the environment, global options and overrides.

    Raises:
        typer.Exit: If the configuration is invalid.
    """
    from dexcache.config import load_config

    options = dict(ctx.obj or {})
    options.update(overrides)
    try:
        config = load_config(**options)
    except DexcacheError as e:
        raise _fail(e) from None
    return build_dex(config)


@app.command()
def fetch(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Resource URL to fetch."),
    key: str | None = typer.Option(
        None,
        "--key",
        "-k",
        help="Cache key to store the resource under. Defaults to the URL.",
    ),
) -> None:
    """Fetch one JSON resource through the cache and print it."""
    with load_dex_context(ctx) as dex:
        try:
            data = dex.fetch_resource(url, key)
        except DexcacheError as e:
            raise _fail(e) from None

    if data is None:
        typer.echo(f"No cached data for '{key or url}' and offline.", err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


@app.command()
def load(
    ctx: typer.Context,
    max_records: int | None = typer.Option(
        None,
        "--max",
        "-m",
        help="Number of list entries to load.",
    ),
    batch_size: int | None = typer.Option(
        None,
        "--batch-size",
        help="Records fetched concurrently per batch.",
    ),
    delay: float | None = typer.Option(
        None,
        "--delay",
        help="Seconds to wait between batches.",
    ),
    retry: bool = typer.Option(
        False,
        "--retry",
        help="Retry failed records once before reporting.",
    ),
) -> None:
    """Load every record, from the snapshot, the network or the disk cache."""
    from dexcache import RichProgressReporter
    from dexcache.cli.formatting import _failures_table

    dex = load_dex_context(
        ctx, max_records=max_records, batch_size=batch_size, batch_delay=delay
    )
    with dex:
        try:
            with RichProgressReporter() as progress:
                records = dex.get_all_records(max_records, progress=progress)
        except DexcacheError as e:
            raise _fail(e) from None

        if retry and dex.failures:
            recovered = dex.retry_failed()
            typer.echo(f"Recovered {len(recovered)} records on retry.")
            records = dex.aggregator.get_cached_snapshot() or records

        typer.echo(f"Loaded {len(records)} records.")
        failures = dex.failures
        if failures:
            typer.echo(f"{len(failures)} items failed:")
            Console(force_terminal=True).print(_failures_table(failures))


@app.command()
def show(
    ctx: typer.Context,
    id_or_name: str = typer.Argument(..., help="Record id or name."),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the complete record as JSON.",
    ),
    media: bool = typer.Option(
        False,
        "--media",
        help="Also resolve the sprite and cry (local path or remote URL).",
    ),
) -> None:
    """Show a complete record (details, species, encounters, evolution)."""
    from dexcache.cli.formatting import _record_summary

    with load_dex_context(ctx) as dex:
        try:
            record = dex.get_complete_record(id_or_name)
        except DexcacheError as e:
            raise _fail(e) from None

        if record is None:
            typer.echo(f"Record '{id_or_name}' not found.", err=True)
            typer.echo("Hint: check the name, or go online to fetch it.", err=True)
            raise typer.Exit(1)

        if as_json:
            typer.echo(json.dumps(record, indent=2, ensure_ascii=False))
        else:
            for line in _record_summary(record):
                typer.echo(line)

        if media:
            typer.echo(f"  Sprite: {dex.load_sprite(record) or 'none'}")
            typer.echo(f"  Cry: {dex.load_cry(record['id'])}")


@app.command()
def clear(
    ctx: typer.Context,
    target: str = typer.Argument(
        "all",
        help="Cache to clear: data, sprites, audio or all.",
    ),
) -> None:
    """Delete cached files for one domain or all of them."""
    with load_dex_context(ctx, probe_on_start=False) as dex:
        try:
            result = dex.clear_cache(target)
        except DexcacheError as e:
            raise _fail(e) from None

    if not result.success:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Cleared {target} cache.")


@app.command()
def check(ctx: typer.Context) -> None:
    """Probe connectivity to the remote API."""
    from dexcache.cli.formatting import _format_connectivity

    with load_dex_context(ctx, probe_on_start=False) as dex:
        status = dex.check_connectivity()
        url = dex.data_cache.probe_url

    console = Console(force_terminal=True)
    console.print(_format_connectivity(status["online"]), f"({url})")
    if not status["online"]:
        raise typer.Exit(1)


def main() -> None:
    """Entry point for the CLI."""
    app()
