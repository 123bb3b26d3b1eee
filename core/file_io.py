import io
import os
import sys
from pathlib import Path
from types import TracebackType
from typing import Protocol, TextIO

from core.exceptions import FileWriteError, InvalidFilePathError
from constants import DEFAULT_ENCODING


class FileOpener(Protocol):
    """
    Protocol defining how source files are opened for line-by-line reading.

    This protocol lets the scanner read from the filesystem in production and
    from in-memory sources in tests.
    """

    def open_file(self, file_path: Path, encoding: str = DEFAULT_ENCODING) -> TextIO:
        """
        Open a source file for reading text lines.

        Args:
            file_path: The path to open, relative paths being resolved against
                the current working directory.
            encoding: Text encoding of the file.

        Returns:
            An open text stream. The caller owns it and must close it.

        Raises:
            OSError: If the file cannot be opened.
        """
        ...


class LineWriter(Protocol):
    """
    Protocol defining the destination of preprocessed source lines.

    Writers are context managers: the destination is opened on entry and
    released on exit.
    """

    def __enter__(self) -> "LineWriter": ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...

    def write_line(self, text: str) -> None:
        """
        Write one line of text followed by a newline.

        Args:
            text: The line, without terminator.
        """
        ...


class FilesystemFileOpener:
    def open_file(self, file_path: Path, encoding: str = DEFAULT_ENCODING) -> TextIO:
        # Lines end at "\n" only; a bare "\r" stays part of the line text.
        return open(file_path, "r", encoding=encoding, newline="\n")


class StreamLineWriter:
    """
    LineWriter over an already open text stream, stdout by default.

    The stream is looked up when entering, so a replaced sys.stdout (as in
    test runners) is honoured. The stream is flushed, never closed.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._active: TextIO | None = None

    def __enter__(self) -> "StreamLineWriter":
        self._active = self._stream if self._stream is not None else sys.stdout
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._active is not None:
            self._active.flush()
        self._active = None

    def write_line(self, text: str) -> None:
        if self._active is None:
            raise RuntimeError("StreamLineWriter must be used as a context manager")
        try:
            self._active.write(text + "\n")
        except OSError as e:
            raise FileWriteError(
                message="Failed to write preprocessed source",
                original_exception=e,
            ) from e


class FilesystemLineWriter:
    def __init__(self, file_path: Path, encoding: str = DEFAULT_ENCODING) -> None:
        self.file_path = file_path
        self.encoding = encoding
        self._file: TextIO | None = None

    @classmethod
    def from_path(
        cls, file_path: Path, encoding: str = DEFAULT_ENCODING
    ) -> "FilesystemLineWriter":
        """
        Create a writer for `file_path`, checking that it can be created.

        Args:
            file_path: The path of the file to (over)write.
            encoding: Text encoding of the written file.

        Returns:
            FilesystemLineWriter instance configured for the given path.

        Raises:
            InvalidFilePathError: If file_path is invalid (e.g., parent directory
                doesn't exist or is not writable, or the path is a directory).
        """
        parent = file_path.parent
        if not parent.exists():
            raise InvalidFilePathError(
                message=f"Parent directory does not exist: {parent}",
                file_path=str(file_path),
            )
        if not os.access(parent, os.W_OK):
            raise InvalidFilePathError(
                message=f"Parent directory is not writable: {parent}",
                file_path=str(file_path),
            )
        if file_path.is_dir():
            raise InvalidFilePathError(
                message=f"Output path is a directory: {file_path}",
                file_path=str(file_path),
            )
        return cls(file_path, encoding)

    def __enter__(self) -> "FilesystemLineWriter":
        try:
            self._file = open(self.file_path, "w", encoding=self.encoding)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to open output file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def write_line(self, text: str) -> None:
        """
        Write one line to the output file.

        Raises:
            RuntimeError: If the writer is not entered.
            FileWriteError: If writing to the file fails.
        """
        if self._file is None:
            raise RuntimeError("FilesystemLineWriter must be used as a context manager")
        try:
            self._file.write(text + "\n")
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to write to file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e


class MockFileOpener:
    """
    Mock implementation of FileOpener for testing.

    Serves in-memory file contents keyed by the path string exactly as it was
    requested, and keeps every stream it hands out so tests can check that
    all of them were closed.
    """

    def __init__(self, files: dict[str, str] | None = None) -> None:
        """
        Initialize MockFileOpener with in-memory file contents.

        Args:
            files: Mapping of path (as passed to open_file) to file content.
                Paths missing from the mapping raise FileNotFoundError.

        Attributes (for test inspection):
            open_file_calls: List of paths passed to open_file()
            opened_streams: Streams handed out, in opening order
        """
        self.files = dict(files or {})
        self.open_file_calls: list[Path] = []
        self.opened_streams: list[io.StringIO] = []

    def open_file(self, file_path: Path, encoding: str = DEFAULT_ENCODING) -> TextIO:
        self.open_file_calls.append(file_path)
        key = str(file_path)
        if key not in self.files:
            raise FileNotFoundError(2, "No such file or directory", key)
        stream = io.StringIO(self.files[key], newline="\n")
        self.opened_streams.append(stream)
        return stream

    @property
    def open_count(self) -> int:
        """Number of handed-out streams that have not been closed yet."""
        return sum(1 for stream in self.opened_streams if not stream.closed)


class MockLineWriter:
    """
    Mock implementation of LineWriter for testing.

    Attributes (for test inspection):
        lines: Every line written, in order.
        entered / exited: Whether the writer context was entered and exited.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.entered = False
        self.exited = False

    def __enter__(self) -> "MockLineWriter":
        self.entered = True
        return self

    def __exit__(self, *args) -> None:
        self.exited = True

    def write_line(self, text: str) -> None:
        self.lines.append(text)
