"""
Progress reporting for preprocessing runs.

The preprocess pipeline reports what it scans through the ScanProgressDisplay
protocol, so core logic never touches Rich directly. RichScanProgressDisplay
shows a transient spinner on stderr with the file being scanned and a running
line count; NoOpScanProgressDisplay is used by tests and by `--quiet`.

Progress callbacks are invoked from a pipeline thread. Rich's Progress
serializes its updates, so that is safe.
"""

from enum import StrEnum
from types import TracebackType
from typing import Protocol

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from core.models import PreprocessStats, ScanEvent
from utils import err_console


class ProgressState(StrEnum):
    """
    Progress states with the color used to render their description.

    Attributes:
        IN_PROGRESS: Magenta color while files are being scanned.
        COMPLETE: Green color once the stream is exhausted.
        ERROR: Red color when the scan stopped on an error.
    """

    IN_PROGRESS = "magenta"
    COMPLETE = "green"
    ERROR = "red"


def create_progress(console: Console | None = None) -> Progress:
    """
    Create a Rich Progress for an indeterminate scan.

    The total number of lines is unknown until every include has been read,
    so the display shows a spinner and a running count instead of a bar.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed} lines"),
        TimeElapsedColumn(),
        console=console if console is not None else err_console,
        transient=True,
    )


def styled(state: ProgressState, description: str) -> str:
    return f"[{state}]{escape(description)}"


class ScanProgressDisplay(Protocol):
    """
    Protocol for reporting scan progress.

    The lifecycle is:
    1. Context manager entry (__enter__)
    2. on_start() - once, with the root file
    3. on_event() - for every event flowing through the pipeline
    4. on_complete() or on_error() - once at the end
    5. Context manager exit (__exit__)
    """

    def __enter__(self) -> "ScanProgressDisplay": ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...

    def on_start(self, root: str) -> None: ...

    def on_event(self, event: ScanEvent) -> None: ...

    def on_complete(self, stats: PreprocessStats) -> None: ...

    def on_error(self, message: str) -> None: ...


class RichScanProgressDisplay:
    def __init__(self, console: Console | None = None) -> None:
        """Initialize the display. The Progress instance is created on entry."""
        self._console = console
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def __enter__(self) -> "RichScanProgressDisplay":
        self._progress = create_progress(self._console)
        self._progress.__enter__()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._progress:
            self._progress.__exit__(exc_type, exc_val, exc_tb)

    def _require_task(self) -> tuple[Progress, TaskID]:
        if not self._progress:
            raise RuntimeError(
                "RichScanProgressDisplay must be used as a context manager. "
                "Use: with RichScanProgressDisplay() as display:"
            )
        if self._task is None:
            raise RuntimeError("on_start() must be called first")
        return self._progress, self._task

    def on_start(self, root: str) -> None:
        """
        Create the progress task for a scan of `root`.

        Raises:
            RuntimeError: If not used as a context manager.
        """
        if not self._progress:
            raise RuntimeError(
                "RichScanProgressDisplay must be used as a context manager. "
                "Use: with RichScanProgressDisplay() as display:"
            )
        self._task = self._progress.add_task(
            styled(ProgressState.IN_PROGRESS, f"Preprocessing {root}"), total=None
        )

    def on_event(self, event: ScanEvent) -> None:
        """Count lines; show the active file on every file change."""
        progress, task = self._require_task()
        if event.is_file_change:
            progress.update(
                task, description=styled(ProgressState.IN_PROGRESS, f"Scanning {event.text}")
            )
        else:
            progress.update(task, advance=1)

    def on_complete(self, stats: PreprocessStats) -> None:
        progress, task = self._require_task()
        progress.update(
            task,
            completed=stats.lines,
            description=styled(
                ProgressState.COMPLETE, f"Preprocessed {len(stats.files)} file(s)"
            ),
        )

    def on_error(self, message: str) -> None:
        progress, task = self._require_task()
        progress.update(task, description=styled(ProgressState.ERROR, message))


class NoOpScanProgressDisplay:
    """No-op implementation of ScanProgressDisplay."""

    def __enter__(self) -> "NoOpScanProgressDisplay":
        return self

    def __exit__(self, *args) -> None:
        pass

    def on_start(self, root: str) -> None:
        pass

    def on_event(self, event: ScanEvent) -> None:
        pass

    def on_complete(self, stats: PreprocessStats) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass
