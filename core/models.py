"""
Core data models for the scanning pipeline.

This module defines the events produced by the file scanner and the summary
collected while a preprocessing run drains them.
"""

from dataclasses import dataclass, field
from enum import Enum


class EventKind(Enum):
    LINE = "line"
    FILE_CHANGE = "file_change"


@dataclass(frozen=True)
class ScanEvent:
    """
    A single event of the preprocessed source stream.

    A FILE_CHANGE event announces that the following LINE events belong to
    `text` (a path), either because an include was entered or because the
    scanner returned to the including file.

    Attributes:
        text: The line content without its terminator, or the path of the file
            being entered for FILE_CHANGE events.
        line_number: 1-based line number within the active file. Always 0 for
            FILE_CHANGE events.
        kind: Whether this is a LINE or a FILE_CHANGE event.
    """

    text: str
    line_number: int = 0
    kind: EventKind = EventKind.LINE

    @classmethod
    def line(cls, text: str, line_number: int) -> "ScanEvent":
        return cls(text, line_number, EventKind.LINE)

    @classmethod
    def file_change(cls, path: str) -> "ScanEvent":
        return cls(path, 0, EventKind.FILE_CHANGE)

    @property
    def is_file_change(self) -> bool:
        return self.kind is EventKind.FILE_CHANGE

    @property
    def source_line(self) -> str:
        """The line text as it appears after preprocessing ("" for file changes)."""
        if self.is_file_change:
            return ""
        return self.text

    def __str__(self) -> str:
        if self.is_file_change:
            return f"file  : {self.text}"
        return f"line {self.line_number}: {self.text}"


@dataclass
class PreprocessStats:
    """
    Counters collected while a preprocessing pipeline is drained.

    Attributes:
        lines: Number of LINE events seen.
        file_changes: Number of FILE_CHANGE events seen (entering and resuming).
        files: Distinct file paths entered, in first-seen order.
    """

    lines: int = 0
    file_changes: int = 0
    files: list[str] = field(default_factory=list)

    def record(self, event: ScanEvent) -> None:
        if event.is_file_change:
            self.file_changes += 1
            if event.text not in self.files:
                self.files.append(event.text)
        else:
            self.lines += 1
