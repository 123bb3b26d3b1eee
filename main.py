"""
llamac CLI Entry Point.

This module implements the command-line interface of llamac, a compiler for
the Llama programming language. Only the front-end input stage exists so far:
the preprocessor reads the root source file, splices in every file named by an
`#include "path"` directive, and streams the result through the rest of the
pipeline.

The run operates in three steps:

1.  **Validation**: Typer checks that the root file exists; settings are loaded
    from `~/.llamac/settings.json` and overridden by command-line options.
2.  **Pipeline Construction**: The file scanner is wrapped with an optional
    print-source tap that writes the preprocessed text to stdout or a file.
3.  **Execution**: The pipeline is drained up to the requested stage. Stages
    after preprocessing are not implemented yet and are reported as such.

Usage:
    $ python main.py program.lla --stop-after preprocess --print-source stdout

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal output, colors, and progress visualization.
"""

import codecs
from contextlib import nullcontext
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from constants import CONFIG_FILE, LAST_IMPLEMENTED_STAGE, STDOUT_DESTINATIONS
from core.config import ScanConfig, load_config, save_config
from core.exceptions import ConfigError, OutputError, ScanError
from core.file_io import FilesystemLineWriter, LineWriter, StreamLineWriter
from core.preprocess import preprocess
from models import StopAfter
from ui.progress import NoOpScanProgressDisplay, RichScanProgressDisplay
from utils import err_console, print_error, print_warning, set_verbose

app = typer.Typer()


@app.command()
def main(
    file: Annotated[
        Path,
        typer.Argument(
            exists=True,  # Typer throws a usage error if the root file is missing
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Root source file to compile.",
        ),
    ],
    stop_after: Annotated[
        StopAfter,
        typer.Option(
            "--stop-after",
            "-s",
            help="Stop after the specified stage of the frontend.",
        ),
    ] = StopAfter.IRGEN,
    print_source: Annotated[
        str | None,
        typer.Option(
            "--print-source",
            metavar="DEST",
            help="Print the input text after preprocessing to DEST ('stdout', '-' or a file path).",
        ),
    ] = None,
    config_file: Annotated[
        Path,
        typer.Option("--config", dir_okay=False, help="Settings file to read."),
    ] = CONFIG_FILE,
    encoding: Annotated[
        str | None,
        typer.Option(help="Encoding of the source files (overrides the settings file)."),
    ] = None,
    no_cycle_check: Annotated[
        bool,
        typer.Option(
            "--no-cycle-check",
            help="Do not reject files that include themselves.",
        ),
    ] = False,
    save: Annotated[
        bool,
        typer.Option(
            "--save-config",
            help="Store the effective --encoding/--no-cycle-check settings as defaults.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Hide the progress display and summary."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Print debug traces of the scanner."),
    ] = False,
):
    """
    Compile FILE, currently up to and including the preprocessing stage.

    Raises:
        typer.Exit: With code 1 on configuration, scan or output errors.
    """
    set_verbose(verbose)

    config = resolve_config(config_file, encoding, no_cycle_check)
    if save:
        try:
            save_config(config, config_file)
        except ConfigError as e:
            print_error(e.message)
            raise typer.Exit(code=1) from e
        err_console.print(
            f"[green]Settings saved to {escape(str(config_file))}.[/green]",
            soft_wrap=True,
        )

    if stop_after.runs_after(LAST_IMPLEMENTED_STAGE):
        print_warning(
            f"stage '{stop_after}' is not available yet, "
            f"stopping after '{LAST_IMPLEMENTED_STAGE}'"
        )

    try:
        writer = make_source_writer(print_source, config.encoding)
    except OutputError as e:
        print_output_err(e)

    # The spinner would interleave with source printed to the terminal.
    show_progress = not quiet and print_source not in STDOUT_DESTINATIONS
    display = RichScanProgressDisplay() if show_progress else NoOpScanProgressDisplay()

    try:
        with (writer if writer is not None else nullcontext()) as source_writer:
            stats = preprocess(
                str(file),
                config=config,
                source_writer=source_writer,
                progress_display=display,
            )
    except ScanError as e:
        print_scan_err(e)
    except OutputError as e:
        print_output_err(e)

    if not quiet:
        err_console.print(
            f"[green]Preprocessed {stats.lines} line(s) "
            f"from {len(stats.files)} file(s).[/green]",
            soft_wrap=True,
        )


def resolve_config(
    config_file: Path, encoding: str | None, no_cycle_check: bool
) -> ScanConfig:
    """
    Merge the settings file with command-line overrides.

    Raises:
        typer.Exit: If the settings file is invalid or the encoding is unknown.
    """
    try:
        config = load_config(config_file)
    except ConfigError as e:
        print_error(e.message)
        raise typer.Exit(code=1) from e

    if encoding is not None:
        config = replace(config, encoding=encoding)
    if no_cycle_check:
        config = replace(config, detect_cycles=False)

    try:
        codecs.lookup(config.encoding)
    except LookupError as e:
        print_error(f"Unknown encoding: {config.encoding}")
        raise typer.Exit(code=1) from e

    return config


def make_source_writer(destination: str | None, encoding: str) -> LineWriter | None:
    """
    Build the writer for --print-source.

    Returns:
        None when no destination was given, a stdout writer for 'stdout' or
        '-', a file writer otherwise.

    Raises:
        InvalidFilePathError: If the destination file cannot be created.
    """
    if destination is None:
        return None
    if destination in STDOUT_DESTINATIONS:
        return StreamLineWriter()
    return FilesystemLineWriter.from_path(Path(destination), encoding)


def print_scan_err(e: ScanError) -> None:
    """
    Displays a scan failure with its location and exits.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    print_error(str(e))
    line_text = getattr(e, "line_text", None)
    if line_text is not None:
        err_console.print(
            f"  [yellow]{escape(line_text)}[/yellow]", highlight=False, soft_wrap=True
        )
    if e.original_exception:
        err_console.print(
            f"Technical details: {escape(str(e.original_exception))}",
            highlight=False,
            soft_wrap=True,
        )
    raise typer.Exit(code=1) from e


def print_output_err(e: OutputError) -> None:
    """
    Displays an output destination failure and exits.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    print_error(e.message)
    if e.file_path:
        err_console.print(
            f"File path: [yellow]{escape(e.file_path)}[/yellow]", soft_wrap=True
        )
    raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
