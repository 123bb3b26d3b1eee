"""
Tests for the config module.

Tests cover:
- load_config: defaults, valid files, unknown keys, invalid content
- save_config: directory creation and round trip through load_config
"""

import json

import pytest

from core.config import ScanConfig, load_config, save_config
from core.exceptions import ConfigError


@pytest.mark.unit
def test_defaults():
    config = ScanConfig()

    assert config.encoding == "utf-8"
    assert config.detect_cycles is True


@pytest.mark.unit
def test_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "settings.json") == ScanConfig()


@pytest.mark.unit
def test_values_are_read_and_unknown_keys_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"encoding": "latin-1", "detect_cycles": False, "optimize": 2}),
        encoding="utf-8",
    )

    assert load_config(path) == ScanConfig(encoding="latin-1", detect_cycles=False)


@pytest.mark.unit
def test_partial_file_keeps_other_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text('{"detect_cycles": false}', encoding="utf-8")

    assert load_config(path) == ScanConfig(detect_cycles=False)


@pytest.mark.unit
@pytest.mark.parametrize(
    "content,message",
    [
        ("{not json", "Cannot read settings file"),
        ("[1, 2]", "must contain a JSON object"),
        ('{"encoding": 8}', "Setting 'encoding' must be of type str"),
        ('{"detect_cycles": "yes"}', "Setting 'detect_cycles' must be of type bool"),
    ],
)
def test_invalid_files_raise_config_error(tmp_path, content, message):
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as exc_info:
        load_config(path)

    assert message in exc_info.value.message
    assert exc_info.value.file_path == str(path)


@pytest.mark.unit
def test_save_creates_directory_and_round_trips(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    config = ScanConfig(encoding="latin-1", detect_cycles=False)

    save_config(config, path)

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "encoding": "latin-1",
        "detect_cycles": False,
    }
    assert load_config(path) == config


@pytest.mark.unit
def test_save_into_unusable_directory_raises_config_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    path = blocker / "settings.json"

    with pytest.raises(ConfigError) as exc_info:
        save_config(ScanConfig(), path)

    assert "Cannot write settings file" in exc_info.value.message
    assert exc_info.value.file_path == str(path)
    assert isinstance(exc_info.value.__cause__, OSError)
