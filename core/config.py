import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from constants import CONFIG_FILE, DEFAULT_ENCODING
from core.exceptions import ConfigError


@dataclass(frozen=True)
class ScanConfig:
    """
    Settings that change how source files are scanned.

    Attributes:
        encoding: Text encoding used to read every source file.
        detect_cycles: If True, an include of a file that is already being
            scanned raises CyclicIncludeError instead of recursing forever.
    """

    encoding: str = DEFAULT_ENCODING
    detect_cycles: bool = True


def load_config(config_file: Path = CONFIG_FILE) -> ScanConfig:
    """
    Load scan settings from a JSON file.

    Unknown keys are ignored so the file can be shared with later stages.

    Args:
        config_file: The settings file. Defaults to ~/.llamac/settings.json.

    Returns:
        The configured ScanConfig, or the defaults if the file doesn't exist.

    Raises:
        ConfigError: If the file is not valid JSON, is not a JSON object, or
            holds a value of the wrong type.
    """
    if not config_file.exists():
        return ScanConfig()

    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(
            message=f"Cannot read settings file {config_file}: {e}",
            file_path=str(config_file),
        ) from e

    if not isinstance(data, dict):
        raise ConfigError(
            message=f"Settings file {config_file} must contain a JSON object",
            file_path=str(config_file),
        )

    values = {}
    defaults = ScanConfig()
    for f in fields(ScanConfig):
        if f.name not in data:
            continue
        expected = type(getattr(defaults, f.name))
        if not isinstance(data[f.name], expected):
            raise ConfigError(
                message=f"Setting '{f.name}' must be of type {expected.__name__}",
                file_path=str(config_file),
            )
        values[f.name] = data[f.name]

    return ScanConfig(**values)


def save_config(config: ScanConfig, config_file: Path = CONFIG_FILE) -> None:
    """
    Write scan settings to a JSON file, creating its directory if needed.

    Raises:
        ConfigError: If the directory or the file cannot be written.
    """
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(json.dumps(asdict(config), indent=2), encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            message=f"Cannot write settings file {config_file}: {e}",
            file_path=str(config_file),
        ) from e
