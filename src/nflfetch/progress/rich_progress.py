"""Rich-based progress reporter for terminal output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


if TYPE_CHECKING:
    from types import TracebackType

    from rich.console import Console

    from nflfetch.core.ports import ProgressCallback


def _label(url: str) -> str:
    """Short task label: the last path segment of the URL."""
    return url.rstrip("/").rsplit("/", 1)[-1] or url


class RichProgressReporter:
    """Progress reporter using Rich for terminal display.

    Shows one bar per URL being downloaded. Servers that omit
    Content-Length get an indeterminate bar until the body ends.

    Example:
        with RichProgressReporter() as reporter:
            client = FetchClient(progress=reporter)
            rows = DatasetLoader(client).load_from_source(source, 2024, dict)
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the progress display.

        Args:
            console: Console to draw on; Rich's default when None.
        """
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=console,
            transient=False,
        )
        self._tasks: dict[str, TaskID] = {}
        self._started = False

    def __enter__(self) -> RichProgressReporter:
        """Start the progress display."""
        self._progress.start()
        self._started = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Stop the progress display."""
        self._progress.stop()
        self._started = False

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Start tracking a download.

        Args:
            name: The URL being downloaded.
            total: Expected bytes, 0 when unknown.

        Returns:
            A callback to update progress.
        """
        if not self._started:
            self._progress.start()
            self._started = True

        task_id = self._progress.add_task(_label(name), total=total or None)
        self._tasks[name] = task_id

        def callback(downloaded: int, _total: int) -> None:
            self._progress.update(task_id, completed=downloaded)

        return callback

    def finish_task(self, name: str) -> None:
        """Mark a download as complete.

        Args:
            name: The URL passed to start_task().
        """
        task_id = self._tasks.pop(name, None)
        if task_id is None:
            return
        task = next(t for t in self._progress.tasks if t.id == task_id)
        if task.total is None:
            # Unknown length: the bytes seen so far are the whole body.
            self._progress.update(task_id, total=task.completed)
        else:
            self._progress.update(task_id, completed=task.total)
