"""
Type definitions shared across the llamac CLI application.

This module contains the enums used by the command-line surface to describe
the stages of the compiler front-end.
"""

from enum import StrEnum


class StopAfter(StrEnum):
    """
    Enumeration of the front-end stages the compiler can stop after.

    Members are declared in pipeline order, so comparing their positions tells
    whether one stage runs before another. Only PREPROCESS is currently
    implemented; later stages are accepted on the command line and reported
    as unavailable.
    """

    PREPROCESS = "preprocess"
    LEX = "lex"
    PARSE = "parse"
    SEMA = "sema"
    IRGEN = "irgen"

    @property
    def position(self) -> int:
        """Zero-based position of the stage in the pipeline."""
        return list(StopAfter).index(self)

    def runs_after(self, other: "StopAfter") -> bool:
        return self.position > other.position
