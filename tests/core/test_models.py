"""
Tests for the core models module.

Tests cover:
- ScanEvent: constructors, rendering, source_line projection
- PreprocessStats: counting lines, file changes and distinct files
"""

import pytest

from core.models import EventKind, PreprocessStats, ScanEvent


@pytest.mark.unit
def test_line_event():
    event = ScanEvent.line("let x = 1", 3)

    assert event.kind is EventKind.LINE
    assert event.line_number == 3
    assert not event.is_file_change
    assert event.source_line == "let x = 1"
    assert str(event) == "line 3: let x = 1"


@pytest.mark.unit
def test_file_change_event():
    event = ScanEvent.file_change("lib/defs.lla")

    assert event.kind is EventKind.FILE_CHANGE
    assert event.line_number == 0
    assert event.is_file_change
    assert event.source_line == ""
    assert str(event) == "file  : lib/defs.lla"


@pytest.mark.unit
def test_events_compare_by_value():
    assert ScanEvent.line("a", 1) == ScanEvent.line("a", 1)
    assert ScanEvent.line("a", 1) != ScanEvent.line("a", 2)
    assert ScanEvent.line("a.lla", 0) != ScanEvent.file_change("a.lla")


@pytest.mark.unit
def test_stats_record():
    stats = PreprocessStats()
    for event in [
        ScanEvent.file_change("main.lla"),
        ScanEvent.line("a", 1),
        ScanEvent.file_change("lib.lla"),
        ScanEvent.line("b", 1),
        ScanEvent.file_change("main.lla"),
        ScanEvent.line("c", 2),
    ]:
        stats.record(event)

    assert stats.lines == 3
    assert stats.file_changes == 3
    assert stats.files == ["main.lla", "lib.lla"]
