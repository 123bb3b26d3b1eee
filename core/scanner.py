"""
Multi-file preprocessing scanner.

The scanner turns a root source file and every file it includes into one
ordered stream of ScanEvents. An `#include "path"` line is replaced by the
lines of `path`, recursively, and every switch between files is announced by
a FILE_CHANGE event, so the stream reads like the textual substitution of all
includes with the substitution boundaries marked.

Each open file is a FileHandle with its own reader thread. The scanner keeps
the handles of the current inclusion path on a stack that only its driving
thread touches: the root file sits at the bottom and the most deeply included
file on top. A handle is popped, and its file closed, as soon as the file is
exhausted; the stream ends when the stack is empty.
"""

from pathlib import Path
from types import TracebackType
from typing import Iterator

from constants import (
    DEFAULT_ENCODING,
    DIRECTIVE_PREFIX,
    INCLUDE_DIRECTIVE,
    INCLUDE_QUOTE,
)
from core.channel import Channel
from core.config import ScanConfig
from core.exceptions import (
    CyclicIncludeError,
    FileReadError,
    ScanIOError,
    ScanSyntaxError,
)
from core.file_io import FileOpener, FilesystemFileOpener
from core.generators import ChannelGenerator
from core.models import ScanEvent
from utils import debug


def strip_terminator(raw: str) -> str:
    """Drop one trailing "\\n" and then at most one "\\r" (LF and CRLF endings)."""
    return raw.removesuffix("\n").removesuffix("\r")


def parse_include_directive(
    line: str, file_path: str | None = None, line_number: int | None = None
) -> str | None:
    """
    Classify a source line and extract the target of an include directive.

    Only `#include "path"` is a valid directive. The path between the quotes
    is returned verbatim: no normalization and no search path.

    Args:
        line: The raw source line.
        file_path: File the line comes from, used in error messages.
        line_number: 1-based line number, used in error messages.

    Returns:
        The include target, or None if the line is a plain source line.

    Raises:
        ScanSyntaxError: If the line starts with `#` but is not a well-formed
            include directive.
    """
    stripped = line.strip()
    if not stripped.startswith(DIRECTIVE_PREFIX):
        return None

    def fail(message: str) -> ScanSyntaxError:
        return ScanSyntaxError(
            message=message,
            line_text=line,
            file_path=file_path,
            line_number=line_number,
        )

    if not stripped.startswith(INCLUDE_DIRECTIVE):
        raise fail("invalid preprocessor directive (reminder: must be #include)")

    argument = stripped[len(INCLUDE_DIRECTIVE) :].strip()
    if not argument:
        raise fail("empty include path")
    if (
        len(argument) < 2
        or not argument.startswith(INCLUDE_QUOTE)
        or not argument.endswith(INCLUDE_QUOTE)
    ):
        raise fail(
            "invalid include path (reminder: must be surrounded by double quotes)"
        )

    target = argument[1:-1]
    if not target:
        raise fail("empty include path")
    if INCLUDE_QUOTE in target:
        raise fail("invalid include path (trailing arguments after the quoted path)")
    return target


class FileHandle:
    """
    An open source file whose lines are read by a background thread.

    The file is opened by the constructor, so a missing file fails here and no
    thread is started. The reader thread closes the file as soon as it reaches
    end-of-file, hits a read error, or the handle is closed.

    Attributes:
        filename: The path as given (root path or include target).
        current_line: Number of lines handed out so far, i.e. the 1-based
            number of the line returned by the last successful `next`.
    """

    def __init__(
        self,
        filename: str,
        opener: FileOpener | None = None,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        self.filename = filename
        self.current_line = 0
        opener = opener if opener is not None else FilesystemFileOpener()

        try:
            stream = opener.open_file(Path(filename), encoding)
        except OSError as e:
            reason = e.strerror or str(e)
            raise ScanIOError(
                message=f"Cannot open source file '{filename}': {reason}",
                target=filename,
                original_exception=e,
            ) from e

        def read_lines(channel: Channel[str]) -> None:
            with stream:
                lines_read = 0
                try:
                    for raw in stream:
                        lines_read += 1
                        if not channel.send(strip_terminator(raw)):
                            return
                except (OSError, UnicodeDecodeError) as e:
                    raise FileReadError(
                        message=f"Cannot read source file '{filename}': {e}",
                        target=filename,
                        line_number=lines_read + 1,
                        original_exception=e,
                    ) from e

        self._lines: ChannelGenerator[str] = ChannelGenerator(
            read_lines, name=f"read:{filename}"
        )

    @property
    def exhausted(self) -> bool:
        return self._lines.exhausted

    def next(self) -> tuple[str | None, bool]:
        """
        Pull the next line of the file.

        Returns:
            `(line, True)` with the line terminator stripped, or `(None, False)`
            once the file is exhausted.

        Raises:
            FileReadError: If reading the file failed.
        """
        line, ok = self._lines.next()
        if ok:
            self.current_line += 1
        return line, ok

    def close(self) -> None:
        self._lines.close()


class FileScanner:
    """
    Generator of ScanEvents for a root file and everything it includes.

    The root file is opened by the constructor: a missing root raises
    ScanIOError before any event exists. Every later failure (unreadable
    include, malformed directive, include cycle) ends the stream and is raised
    from `next` after all the events that precede it.

    Args:
        root: Path of the root source file, used verbatim.
        opener: How source files are opened. Defaults to the filesystem.
        config: Scan settings. Defaults to ScanConfig().
    """

    def __init__(
        self,
        root: str,
        opener: FileOpener | None = None,
        config: ScanConfig | None = None,
    ) -> None:
        self.root = root
        self._opener = opener if opener is not None else FilesystemFileOpener()
        self._config = config if config is not None else ScanConfig()

        root_handle = FileHandle(root, self._opener, self._config.encoding)
        debug(f"scan: open root {root}")
        self._events: ChannelGenerator[ScanEvent] = ChannelGenerator(
            lambda channel: self._drive(root_handle, channel), name=f"scan:{root}"
        )

    def _drive(self, root_handle: FileHandle, channel: Channel[ScanEvent]) -> None:
        stack = [root_handle]
        # Resolved path of every file on the stack -> file that included it.
        active: dict[Path, str | None] = {Path(root_handle.filename).resolve(): None}

        try:
            if not channel.send(ScanEvent.file_change(root_handle.filename)):
                return

            while stack:
                handle = stack[-1]
                line, ok = handle.next()

                if not ok:
                    stack.pop()
                    handle.close()
                    active.pop(Path(handle.filename).resolve(), None)
                    debug(f"scan: leave {handle.filename} (depth {len(stack)})")
                    if stack and not channel.send(
                        ScanEvent.file_change(stack[-1].filename)
                    ):
                        return
                    continue

                target = parse_include_directive(
                    line, handle.filename, handle.current_line
                )
                if target is None:
                    if not channel.send(ScanEvent.line(line, handle.current_line)):
                        return
                    continue

                stack.append(self._open_include(target, handle, active))
                debug(
                    f"scan: enter {target} from {handle.filename}:{handle.current_line}"
                    f" (depth {len(stack) - 1})"
                )
                if not channel.send(ScanEvent.file_change(target)):
                    return
        finally:
            for handle in reversed(stack):
                handle.close()

    def _open_include(
        self, target: str, parent: FileHandle, active: dict[Path, str | None]
    ) -> FileHandle:
        key = Path(target).resolve()
        if self._config.detect_cycles and key in active:
            raise CyclicIncludeError(
                included_file=target,
                file_path=parent.filename,
                line_number=parent.current_line,
                previously_included_in=active[key],
            )

        try:
            handle = FileHandle(target, self._opener, self._config.encoding)
        except ScanIOError as e:
            raise ScanIOError(
                message=e.message,
                target=target,
                file_path=parent.filename,
                line_number=parent.current_line,
                original_exception=e.original_exception,
            ) from e

        active[key] = parent.filename
        return handle

    def next(self) -> tuple[ScanEvent | None, bool]:
        return self._events.next()

    def iterate(self) -> Iterator[ScanEvent]:
        return self._events.iterate()

    def __iter__(self) -> Iterator[ScanEvent]:
        return self.iterate()

    def close(self) -> None:
        """Stop scanning and close every file still open, before returning."""
        self._events.close()

    def __enter__(self) -> "FileScanner":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
