from core.config import ScanConfig
from core.exceptions import OutputError, ScanError
from core.file_io import FileOpener, LineWriter
from core.generators import Generator, drain, tap
from core.models import PreprocessStats, ScanEvent
from core.scanner import FileScanner
from ui.progress import RichScanProgressDisplay, ScanProgressDisplay


def write_source_line(writer: LineWriter, event: ScanEvent) -> None:
    """Write the text of a LINE event; FILE_CHANGE events leave no trace in the source."""
    if not event.is_file_change:
        writer.write_line(event.source_line)


def scan_source(
    root: str,
    *,
    config: ScanConfig | None = None,
    opener: FileOpener | None = None,
    source_writer: LineWriter | None = None,
) -> Generator[ScanEvent]:
    """
    Build the event stream of the preprocessing stage.

    This is the stream later front-end stages consume. When `source_writer`
    is given, every source line is also written to it as it flows past,
    without altering the stream.

    Args:
        root: Path of the root source file.
        config: Scan settings. Defaults to ScanConfig().
        opener: How source files are opened. Defaults to the filesystem.
        source_writer: Optional entered LineWriter receiving the preprocessed source.

    Returns:
        A generator of ScanEvents. The caller must drain or close it.

    Raises:
        ScanIOError: If the root file cannot be opened.
    """
    events: Generator[ScanEvent] = FileScanner(root, opener=opener, config=config)
    if source_writer is not None:
        events = tap(events, lambda event: write_source_line(source_writer, event))
    return events


def preprocess(
    root: str,
    *,
    config: ScanConfig | None = None,
    opener: FileOpener | None = None,
    source_writer: LineWriter | None = None,
    progress_display: ScanProgressDisplay | None = None,
) -> PreprocessStats:
    """
    Run the preprocessing stage to completion.

    Scans `root` and its includes, optionally writing the preprocessed source,
    and drains the stream for its side effects.

    Args:
        root: Path of the root source file.
        config: Scan settings. Defaults to ScanConfig().
        opener: How source files are opened. Defaults to the filesystem.
        source_writer: Optional entered LineWriter receiving the preprocessed source.
        progress_display: Progress reporting. Defaults to a Rich spinner on stderr.

    Returns:
        Counters of the events that went through the pipeline.

    Raises:
        ScanError: If a file cannot be opened or read, a directive is
            malformed, or an include cycle is found.
        OutputError: If writing the preprocessed source fails.
    """
    display = (
        progress_display if progress_display is not None else RichScanProgressDisplay()
    )
    stats = PreprocessStats()

    with display as d:
        d.on_start(root)
        try:
            events = scan_source(
                root, config=config, opener=opener, source_writer=source_writer
            )
            events = tap(events, stats.record)
            events = tap(events, d.on_event)
            drain(events)
        except (ScanError, OutputError) as e:
            d.on_error(str(e))
            raise
        d.on_complete(stats)

    return stats
