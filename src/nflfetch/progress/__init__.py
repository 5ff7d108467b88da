"""Progress reporting adapters."""

from nflfetch.progress.rich_progress import RichProgressReporter


__all__ = ["RichProgressReporter"]
