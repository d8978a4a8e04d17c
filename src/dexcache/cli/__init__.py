"""CLI for dexcache."""

# Import commands to register them with the app
# These imports have side effects (registering commands with @app.command())
from dexcache.cli.commands import stats as _stats_module  # noqa: F401
from dexcache.cli.main import app, main


__all__ = ["app", "main"]
