"""Console output helpers for the CLI."""

from typing import Iterable, Optional

from rich.console import Console
from rich.text import Text


class OutputFormatter:
    """Rich-based formatter for user-facing CLI output."""

    def __init__(self, quiet: bool = False, no_color: bool = False):
        """Initialize output formatter.

        Args:
            quiet: Suppress non-essential output (info and summaries)
            no_color: Disable colors and styles
        """
        self.quiet = quiet
        self.console = Console(highlight=False, no_color=no_color)
        self.err_console = Console(stderr=True, highlight=False, no_color=no_color)

    def print(self, message: str = "", style: Optional[str] = None) -> None:
        """Print a message regardless of quiet mode."""
        self.console.print(message, style=style, markup=False, soft_wrap=True)

    def info(self, message: str) -> None:
        """Print an informational message (suppressed in quiet mode)."""
        if self.quiet:
            return
        self.console.print(message, markup=False, soft_wrap=True)

    def success(self, message: str) -> None:
        if self.quiet:
            return
        self.console.print(message, style="green", markup=False, soft_wrap=True)

    def warning(self, message: str) -> None:
        self.err_console.print(message, style="yellow", markup=False, soft_wrap=True)

    def error(self, message: str) -> None:
        self.err_console.print(
            f"Error: {message}", style="bold red", markup=False, soft_wrap=True
        )

    def print_diff(self, lines: Iterable[str]) -> None:
        """Print unified diff lines, colored like ``git diff --color``."""
        for line in lines:
            if line.startswith(("+++", "---")):
                style = "bold"
            elif line.startswith("@@"):
                style = "cyan"
            elif line.startswith("+"):
                style = "green"
            elif line.startswith("-"):
                style = "red"
            else:
                style = ""
            self.console.print(Text(line, style=style), soft_wrap=True)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled list of key/value pairs."""
        if self.quiet:
            return
        self.console.print("")
        self.console.print(title, style="bold", markup=False)
        width = max((len(key) for key, _ in items), default=0)
        for key, value in items:
            self.console.print(
                f"  {key.ljust(width)}  {value}", markup=False, soft_wrap=True
            )
