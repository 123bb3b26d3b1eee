"""
General utility functions for the CLI application.
"""

from rich.console import Console
from rich.markup import escape

# Diagnostics go to stderr so they never mix with preprocessed source on stdout.
err_console: Console = Console(stderr=True)

_verbose = False


def set_verbose(enabled: bool) -> None:
    """Turn debug output on or off for the whole process."""
    global _verbose
    _verbose = enabled


def debug(
    *values: object,
    sep: str = " ",
    end: str = "\n",
) -> None:
    """
    Print debug message with orange formatting when verbose output is enabled.

    Safe to call from producer threads: Rich serializes writes to a console.

    Args:
        *values: Variable number of objects to print. All values are converted to strings.
        sep: Separator string between values. Defaults to a single space.
        end: String appended after the last value. Defaults to newline.
    """
    if not _verbose:
        return

    if not values:
        err_console.print(end=end)
        return

    message = sep.join(str(v) for v in values)

    err_console.print(
        f"DEBUG: {message}", end=end, style="orange1", markup=False, soft_wrap=True
    )


def print_error(message: str) -> None:
    """Print a red error line to stderr."""
    err_console.print(
        f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True
    )


def print_warning(message: str) -> None:
    """Print a yellow warning line to stderr."""
    err_console.print(
        f"[yellow]Warning:[/yellow] {escape(message)}", highlight=False, soft_wrap=True
    )
