"""
Main CLI entry point for filetwin.
"""

# Standard library imports
from pathlib import Path
from typing import Optional

# Third-party imports
import typer

# Local imports
from filetwin import __version__
from filetwin.conflict import ConflictResolver, Resolution
from filetwin.environment import EnvironmentConfig, EnvironmentError
from filetwin.errors import FileTwinError
from filetwin.file_monitor import ChangeWatcher
from filetwin.sync.engine import SyncEngine
from filetwin.utils.logging import configure_logging
from filetwin.utils.rich_console import configure_console_logger, get_console_logger, print_panel, print_table

logger = get_console_logger()


app = typer.Typer(
    help="filetwin - keep two files identical.\n\nWatches both files and copies whichever one changes onto the other.",
    add_completion=False,
)

RESOLUTION_MESSAGES = {
    Resolution.IDENTICAL: "Files are identical. Starting watcher...",
    Resolution.FILLED_A: "A was empty and now holds B's content. Starting watcher...",
    Resolution.FILLED_B: "B was empty and now holds A's content. Starting watcher...",
    Resolution.RESET: "Both files backed up and cleared. Starting watcher...",
}


def version_callback(value: bool):
    if value:
        typer.echo(f"filetwin version: {__version__}")
        raise typer.Exit()


@app.command()
def link(
    path_a: Path = typer.Argument(..., help="First file of the pair"),
    path_b: Path = typer.Argument(..., help="Second file of the pair"),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="If the files differ, back both up as <name>_backup.<ext> and start from empty files"
    ),
    fill_empty: bool = typer.Option(
        False, "--fill-empty", help="If exactly one file is empty, copy the other one onto it instead of refusing"
    ),
    debounce: Optional[float] = typer.Option(
        None, "--debounce", min=0.0, help="Seconds a file must be quiet before a change is handled (default 0.5)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every discarded event"),
    version: bool = typer.Option(
        False, "--version", callback=version_callback, is_eager=True, help="Show the filetwin version"
    ),
):
    """Link PATH_A and PATH_B so that editing either one updates the other.

    Press Ctrl+C to stop.
    """
    try:
        config = EnvironmentConfig.load()
    except EnvironmentError as error:
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(1)

    level = "DEBUG" if verbose else config.log_level
    configure_console_logger(level, config.FILETWIN_LOG_FILE)
    configure_logging(level)

    resolved_a = path_a.expanduser().resolve()
    resolved_b = path_b.expanduser().resolve()
    if resolved_a == resolved_b:
        raise typer.BadParameter("PATH_A and PATH_B refer to the same file", param_hint="PATH_B")

    print_panel(f"{resolved_a}\n<==>\n{resolved_b}", title="Linking")

    try:
        pair, resolution = ConflictResolver(
            resolved_a, resolved_b, overwrite=overwrite, fill_empty=fill_empty
        ).resolve()
        logger.success(RESOLUTION_MESSAGES[resolution])

        debounce_seconds = debounce if debounce is not None else config.FILETWIN_DEBOUNCE_SECONDS
        engine = SyncEngine(pair, ChangeWatcher(pair.paths, debounce_seconds=debounce_seconds))
        stats = engine.run()
    except FileTwinError as error:
        logger.error(error.message)
        raise typer.Exit(error.exit_code)

    print_table(
        ["Metric", "Count"],
        [[name.capitalize(), value] for name, value in stats.to_dict().items()],
        title="Sync Summary",
    )
    typer.echo("Stopped watching.")


if __name__ == "__main__":
    app()
