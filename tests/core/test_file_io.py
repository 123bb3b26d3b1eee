"""
Tests for the file_io module.

Tests cover:
- FilesystemFileOpener: reading real files with line terminators intact
- StreamLineWriter / FilesystemLineWriter: writing lines, context manager rules
- FilesystemLineWriter.from_path: destination validation
- MockFileOpener: in-memory files and open stream bookkeeping
"""

import io
from pathlib import Path

import pytest

from core.exceptions import FileWriteError, InvalidFilePathError
from core.file_io import (
    FilesystemFileOpener,
    FilesystemLineWriter,
    MockFileOpener,
    StreamLineWriter,
)


# ============================================================================
# Tests for FilesystemFileOpener
# ============================================================================


@pytest.mark.unit
def test_filesystem_opener_keeps_line_terminators(tmp_path):
    path = tmp_path / "crlf.lla"
    path.write_bytes(b"a\r\nb\n")

    with FilesystemFileOpener().open_file(path) as stream:
        assert stream.readlines() == ["a\r\n", "b\n"]


@pytest.mark.unit
def test_filesystem_opener_missing_file_raises_oserror(tmp_path):
    with pytest.raises(FileNotFoundError):
        FilesystemFileOpener().open_file(tmp_path / "absent.lla")


# ============================================================================
# Tests for StreamLineWriter
# ============================================================================


@pytest.mark.unit
def test_stream_writer_appends_newlines():
    buffer = io.StringIO()

    with StreamLineWriter(buffer) as writer:
        writer.write_line("first")
        writer.write_line("")
        writer.write_line("third")

    assert buffer.getvalue() == "first\n\nthird\n"
    assert not buffer.closed


@pytest.mark.unit
def test_stream_writer_defaults_to_stdout(capsys):
    with StreamLineWriter() as writer:
        writer.write_line("hello")

    assert capsys.readouterr().out == "hello\n"


@pytest.mark.unit
def test_stream_writer_requires_context_manager():
    with pytest.raises(RuntimeError, match="context manager"):
        StreamLineWriter(io.StringIO()).write_line("x")


@pytest.mark.unit
@pytest.mark.mock
def test_stream_writer_wraps_oserror(mocker):
    stream = mocker.MagicMock()
    stream.write.side_effect = OSError("broken pipe")

    with StreamLineWriter(stream) as writer:
        with pytest.raises(FileWriteError) as exc_info:
            writer.write_line("x")

    assert isinstance(exc_info.value.original_exception, OSError)


# ============================================================================
# Tests for FilesystemLineWriter
# ============================================================================


@pytest.mark.unit
def test_filesystem_writer_writes_file(tmp_path):
    path = tmp_path / "out.lla"

    with FilesystemLineWriter.from_path(path) as writer:
        writer.write_line("let x = 1")
        writer.write_line("let y = 2")

    assert path.read_text(encoding="utf-8") == "let x = 1\nlet y = 2\n"


@pytest.mark.unit
def test_filesystem_writer_overwrites_existing_file(tmp_path):
    path = tmp_path / "out.lla"
    path.write_text("old content\n", encoding="utf-8")

    with FilesystemLineWriter.from_path(path) as writer:
        writer.write_line("new")

    assert path.read_text(encoding="utf-8") == "new\n"


@pytest.mark.unit
def test_filesystem_writer_uses_encoding(tmp_path):
    path = tmp_path / "out.lla"

    with FilesystemLineWriter.from_path(path, "latin-1") as writer:
        writer.write_line("café")

    assert path.read_bytes() == "café\n".encode("latin-1")


@pytest.mark.unit
def test_from_path_rejects_missing_parent(tmp_path):
    with pytest.raises(InvalidFilePathError) as exc_info:
        FilesystemLineWriter.from_path(tmp_path / "missing" / "out.lla")

    assert "does not exist" in exc_info.value.message


@pytest.mark.unit
def test_from_path_rejects_directory(tmp_path):
    with pytest.raises(InvalidFilePathError) as exc_info:
        FilesystemLineWriter.from_path(tmp_path)

    assert "is a directory" in exc_info.value.message


@pytest.mark.unit
@pytest.mark.mock
def test_from_path_rejects_read_only_parent(tmp_path, mocker):
    mocker.patch("core.file_io.os.access", return_value=False)

    with pytest.raises(InvalidFilePathError) as exc_info:
        FilesystemLineWriter.from_path(tmp_path / "out.lla")

    assert "not writable" in exc_info.value.message


@pytest.mark.unit
def test_filesystem_writer_requires_context_manager(tmp_path):
    writer = FilesystemLineWriter(tmp_path / "out.lla")

    with pytest.raises(RuntimeError, match="context manager"):
        writer.write_line("x")


@pytest.mark.unit
@pytest.mark.mock
def test_filesystem_writer_open_failure_is_write_error(tmp_path, mocker):
    mocker.patch("core.file_io.open", side_effect=PermissionError("denied"), create=True)
    writer = FilesystemLineWriter(tmp_path / "out.lla")

    with pytest.raises(FileWriteError) as exc_info:
        writer.__enter__()

    assert exc_info.value.file_path == str(tmp_path / "out.lla")


# ============================================================================
# Tests for MockFileOpener
# ============================================================================


@pytest.mark.unit
def test_mock_opener_serves_content_and_tracks_streams():
    opener = MockFileOpener({"a.lla": "x\ny\n"})

    stream = opener.open_file(Path("a.lla"))

    assert stream.read() == "x\ny\n"
    assert opener.open_file_calls == [Path("a.lla")]
    assert opener.open_count == 1
    stream.close()
    assert opener.open_count == 0


@pytest.mark.unit
def test_mock_opener_missing_file():
    opener = MockFileOpener({})

    with pytest.raises(FileNotFoundError):
        opener.open_file(Path("nope.lla"))

    assert opener.opened_streams == []


@pytest.mark.unit
def test_filesystem_opener_splits_on_line_feed_only(tmp_path):
    path = tmp_path / "mixed.lla"
    path.write_bytes(b"a\rb\nc")

    with FilesystemFileOpener().open_file(path) as stream:
        assert stream.readlines() == ["a\rb\n", "c"]
