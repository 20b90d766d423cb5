"""Console output formatting."""

from typing import Any

from rich.console import Console


class OutputFormatter:
    """Writes status messages to the terminal.

    Errors and warnings go to stderr, everything else to stdout. In quiet
    mode only errors and warnings are shown.
    """

    def __init__(self, quiet: bool = False, no_color: bool = False):
        """Initialize output formatter.

        Args:
            quiet: Suppress non-essential output
            no_color: Disable colors and styles
        """
        self.quiet = quiet
        self.console = Console(highlight=False, no_color=no_color)
        self.err_console = Console(stderr=True, highlight=False, no_color=no_color)

    def print(self, message: Any = "", **kwargs: Any) -> None:
        if not self.quiet:
            self.console.print(message, **kwargs)

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(message, style="bright_white", markup=False)

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(message, style="bright_green", markup=False)

    def warning(self, message: str) -> None:
        self.err_console.print(f"Warning: {message}", style="yellow", markup=False)

    def error(self, message: str) -> None:
        self.err_console.print(f"Error: {message}", style="bright_red", markup=False)
