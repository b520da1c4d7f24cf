from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from typing import Any
from rich.logging import RichHandler
import logging
import os


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# Singleton Console instance
def get_console() -> Console:
    if not hasattr(get_console, "_console"):
        get_console._console = Console()
    return get_console._console


def print_panel(content: str, title: str | None = None, style: str = "bold blue", border_style: str | None = None):
    """Print a styled panel with optional title using Rich library.

    Args:
        content (str): The text content to display in the panel.
        title (str | None, optional): Title of the panel. Defaults to None.
        style (str, optional): Rich styling for the panel's content. Defaults to "bold blue".
        border_style (str | None, optional): Styling for the panel's border. Defaults to None.
    """
    console = get_console()

    # Ensure style is a non-None string
    style = style or "bold blue"

    # If border_style is None, use the same style as content
    border_style = border_style or style

    panel = Panel(content, title=title, style=style, border_style=border_style)
    console.print(panel)


def print_table(headers: list[str], rows: list[list[Any]], title: str | None = None):
    """Print a formatted table using Rich library.

    Args:
        headers (list[str]): Column headers for the table.
        rows (list[list[Any]]): Data rows to display in the table.
        title (str | None, optional): Title of the table. Defaults to None.
    """
    console = get_console()
    table = Table(title=title)
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*[str(cell) for cell in row])
    console.print(table)


class RichConsoleLogger(logging.Logger):
    def __init__(self, name: str, level: str | None = None, log_file: str | None = None):
        super().__init__(name)

        # Explicit arguments win over the environment
        log_level_str = (level or os.getenv("FILETWIN_LOG_LEVEL", "INFO")).upper()
        debug_mode = os.getenv("FILETWIN_DEBUG", "").lower() in ["true", "1", "yes"]
        if debug_mode and level is None:
            log_level_str = "DEBUG"
        if log_level_str not in LOG_LEVELS:
            get_console().print(f"Invalid log level: {log_level_str}. Using INFO.", style="bold yellow")
            log_level_str = "INFO"

        log_level = logging.getLevelName(log_level_str)
        self.log_level_str = log_level_str
        self.log_level = log_level
        self.setLevel(log_level)

        # Configure handler with rich tracebacks
        handler = RichHandler(console=get_console(), rich_tracebacks=True, level=log_level)
        self.addHandler(handler)

        log_file = log_file or os.getenv("FILETWIN_LOG_FILE")
        if log_file:
            try:
                file_handler = logging.FileHandler(log_file)
                file_handler.setLevel(log_level)
                file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
                file_handler.setFormatter(file_formatter)
                self.addHandler(file_handler)
            except OSError as e:
                self.error(f"Failed to set up file logging: {e}")

    def success(self, message: str, *args, **kwargs):
        """Log a success message at INFO level with a check mark.

        Args:
            message (str): Success message to display.
        """
        self.info(f"✔ {message}", *args, **kwargs)


# Singleton logger instance
_console_logger = None


def get_console_logger() -> RichConsoleLogger:
    """Get a singleton instance of RichConsoleLogger with log level from environment variables.

    Environment variables:
        FILETWIN_LOG_LEVEL: Set the log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        FILETWIN_DEBUG: Force DEBUG level (true, 1, yes)
        FILETWIN_LOG_FILE: Also write log lines to this file

    Returns:
        RichConsoleLogger: Configured logger instance
    """
    global _console_logger
    if _console_logger is None:
        _console_logger = RichConsoleLogger("filetwin")
    return _console_logger


def configure_console_logger(level: str, log_file: str | None = None) -> RichConsoleLogger:
    """Reconfigure the singleton logger in place so module-level references stay valid.

    Args:
        level (str): Log level name.
        log_file (str | None, optional): Extra file sink. Defaults to None.

    Returns:
        RichConsoleLogger: The reconfigured singleton.
    """
    console_logger = get_console_logger()
    configured = RichConsoleLogger(console_logger.name, level=level, log_file=log_file)
    for handler in list(console_logger.handlers):
        console_logger.removeHandler(handler)
        handler.close()
    for handler in configured.handlers:
        console_logger.addHandler(handler)
    console_logger.setLevel(configured.level)
    console_logger.log_level = configured.log_level
    console_logger.log_level_str = configured.log_level_str
    return console_logger
