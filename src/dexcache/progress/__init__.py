"""Progress reporting adapters."""

from dexcache.progress.rich_progress import RichProgressReporter


__all__ = ["RichProgressReporter"]
