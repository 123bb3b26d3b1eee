"""
Shared fixtures for the llamac test suite.

Include targets are resolved against the working directory, so fixtures that
write real source files also chdir into the directory holding them.
"""

from pathlib import Path

import pytest

from core.file_io import MockFileOpener
from core.generators import Generator
from ui.progress import NoOpScanProgressDisplay


@pytest.fixture
def source_dir(tmp_path, monkeypatch):
    """Temporary working directory for source files."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_source(source_dir):
    """Factory writing a source file made of the given lines into source_dir."""

    def _factory(name: str, *lines: str) -> Path:
        path = source_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return path

    return _factory


@pytest.fixture
def mock_opener_factory():
    """Factory for MockFileOpener instances serving files made of lines."""

    def _factory(files: dict[str, list[str]]) -> MockFileOpener:
        return MockFileOpener(
            {name: "".join(line + "\n" for line in lines) for name, lines in files.items()}
        )

    return _factory


@pytest.fixture
def progress_display():
    """Progress display for testing."""
    return NoOpScanProgressDisplay()


@pytest.fixture
def collect():
    """Pull every remaining item of a generator through `next`."""

    def _collect(gen: Generator) -> list:
        items = []
        while True:
            item, ok = gen.next()
            if not ok:
                return items
            items.append(item)

    return _collect
