"""
Application-wide constants.

This module defines the preprocessor grammar literals, I/O defaults and the
configuration file location used throughout the llamac CLI application.
"""

from pathlib import Path
from typing import Final

from models import StopAfter


# The only preprocessor directive understood by the scanner. Every other line
# starting with DIRECTIVE_PREFIX is rejected.
DIRECTIVE_PREFIX: Final[str] = "#"
INCLUDE_DIRECTIVE: Final[str] = "#include"
INCLUDE_QUOTE: Final[str] = '"'

DEFAULT_ENCODING: Final[str] = "utf-8"

# Destinations accepted by --print-source that mean "write to the terminal".
STDOUT_DESTINATIONS: Final[frozenset[str]] = frozenset({"stdout", "-"})

# Last stage that has an implementation behind it.
LAST_IMPLEMENTED_STAGE: Final[StopAfter] = StopAfter.PREPROCESS

CONFIG_DIR: Final[Path] = Path.home() / ".llamac"
CONFIG_FILE: Final[Path] = CONFIG_DIR / "settings.json"
