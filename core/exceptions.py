"""
Custom exception classes for the llamac front-end.

This module defines the exceptions raised while scanning source files,
resolving include directives and writing preprocessed output. Scan errors are
raised inside producer threads and re-raised in the consuming thread, so they
carry enough context (file, line, original exception) to be reported there.
"""

import os
from typing import Optional


class ScanError(Exception):
    """
    Base exception for every failure detected while scanning source files.

    Attributes:
        message: A human-readable error message describing what went wrong.
        file_path: The file being scanned when the error occurred, if known.
        line_number: The 1-based line in file_path that triggered the error,
            if the error is tied to a line.
        original_exception: The underlying exception that caused this error, if any.
        diagnostic_info: A dictionary containing diagnostic information including
            exception type, details, and OS name.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or "An error occurred while scanning source files"
        self.file_path = file_path
        self.line_number = line_number
        self.original_exception = original_exception
        super().__init__(self.message)
        self.diagnostic_info = {
            "type": (
                type(original_exception).__name__ if original_exception else "Unknown"
            ),
            "details": str(original_exception) if original_exception else "No details",
            "os_name": os.name,
        }

    @property
    def location(self) -> str:
        """`file:line` (or just `file`) of the error, empty when unknown."""
        if self.file_path is None:
            return ""
        if self.line_number is None:
            return self.file_path
        return f"{self.file_path}:{self.line_number}"

    def __str__(self) -> str:
        location = self.location
        return f"{location}: {self.message}" if location else self.message


class ScanIOError(ScanError):
    """
    Raised when a root or included source file cannot be opened.

    For an included file, file_path and line_number point at the include
    directive and `target` holds the path that failed to open.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        target: Optional[str] = None,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.target = target
        super().__init__(
            message=message or f"Failed to open source file: {target}",
            file_path=file_path,
            line_number=line_number,
            original_exception=original_exception,
        )


class FileReadError(ScanIOError):
    """Raised when reading an already opened source file fails mid-way."""

    def __init__(
        self,
        message: Optional[str] = None,
        target: Optional[str] = None,
        line_number: Optional[int] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(
            message=message or f"Failed to read source file: {target}",
            target=target,
            file_path=target,
            line_number=line_number,
            original_exception=original_exception,
        )


class ScanSyntaxError(ScanError):
    """
    Raised when a preprocessor directive is malformed.

    Attributes:
        line_text: The offending source line, as read from the file.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        line_text: Optional[str] = None,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        self.line_text = line_text
        super().__init__(
            message=message or "Invalid preprocessor directive",
            file_path=file_path,
            line_number=line_number,
        )


class CyclicIncludeError(ScanError):
    """
    Raised when a file includes itself, directly or through other files.

    Attributes:
        included_file: The path named by the offending include directive.
        previously_included_in: The file that included `included_file` the
            first time, or None when `included_file` is the root file.
    """

    def __init__(
        self,
        included_file: str,
        file_path: str,
        line_number: int,
        previously_included_in: Optional[str] = None,
    ):
        self.included_file = included_file
        self.previously_included_in = previously_included_in
        if previously_included_in is None:
            origin = "it is the root source file"
        else:
            origin = f"previously included in {previously_included_in}"
        super().__init__(
            message=f"Include cycle: {included_file} is already being scanned ({origin})",
            file_path=file_path,
            line_number=line_number,
        )


class OutputError(Exception):
    """
    Base exception for failures writing preprocessed output.

    Attributes:
        message: A human-readable error message describing what went wrong.
        file_path: The destination path involved, if any.
        original_exception: The underlying exception that caused this error, if any.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or "An error occurred while writing output"
        super().__init__(self.message)
        self.file_path = file_path
        self.original_exception = original_exception


class InvalidFilePathError(OutputError):
    """Raised when an output destination cannot be used (missing or read-only parent)."""


class FileWriteError(OutputError):
    """Raised when writing to an output destination fails."""


class ConfigError(Exception):
    """Raised when the settings file exists but cannot be used."""

    def __init__(self, message: Optional[str] = None, file_path: Optional[str] = None):
        self.message = message or "Invalid configuration file"
        super().__init__(self.message)
        self.file_path = file_path
