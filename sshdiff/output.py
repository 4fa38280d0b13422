"""Console output formatting for the sshdiff CLI."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .utils import printable


class OutputFormatter:
    """Writes user facing messages, summaries and JSON documents.

    Text is printed with rich markup disabled, so file names containing
    square brackets are shown verbatim.
    """

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit a single JSON document instead of text lines
            quiet: Suppress non-essential output
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def _emit(self, console: Console, text: str, style: str = "") -> None:
        console.print(
            printable(text),
            style=style or None,
            markup=False,
            emoji=False,
            soft_wrap=True,
        )

    def info(self, message: str) -> None:
        """Print an informational message."""
        if self.quiet or self.json_output:
            return
        self._emit(self.console, message)

    def success(self, message: str) -> None:
        """Print a success message."""
        if self.quiet or self.json_output:
            return
        self._emit(self.console, message, style="green")

    def warning(self, message: str) -> None:
        """Print a warning message (shown even in quiet mode)."""
        if self.json_output:
            return
        self._emit(self.console, message, style="yellow")

    def error(self, message: str) -> None:
        """Print an error message to stderr (always shown)."""
        self._emit(self.err_console, f"Error: {message}", style="bold red")

    def summary(self, text: str) -> None:
        """Print a final summary line (shown in quiet mode, not in JSON mode)."""
        if self.json_output:
            return
        self._emit(self.console, text)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a two column summary table.

        Args:
            title: Table title
            items: (label, value) rows
        """
        if self.json_output:
            self.output_json({label: value for label, value in items})
            return
        if self.quiet:
            return

        table = Table(title=title, show_header=False, box=None)
        table.add_column("Item", style="bold")
        table.add_column("Value")
        for label, value in items:
            table.add_row(Text(label), Text(printable(value)))
        self.console.print(table)

    def output_json(self, data: Any) -> None:
        """Print data as an indented JSON document."""
        self._emit(self.console, json.dumps(data, indent=2))
