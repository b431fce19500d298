"""
Console output for goreplace.

Provides color-coded messages using the Rich library.
"""

from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape


class ReplaceReporter:
    """Formats and displays goreplace messages."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False, soft_wrap=True)

    def print_error(self, message: str) -> None:
        self.console.print(f"Error: {escape(message)}", style="red")

    def print_success(self, message: str) -> None:
        self.console.print(escape(message), style="green")

    def print_info(self, message: str) -> None:
        self.console.print(escape(message))

    def print_matches(self, matched: Sequence[str]) -> None:
        """Print matches as a numbered (1-based) list."""
        self.console.print()
        self.console.print("Multiple matches found:", style="yellow")
        for number, module_path in enumerate(matched, 1):
            self.console.print(f"{number}) {escape(module_path)}", style="blue")

    def print_selected(self, selected: str) -> None:
        self.console.print()
        self.console.print(
            f"[yellow]You selected:[/yellow] [green]{escape(selected)}[/green]"
        )

    def print_usage(self) -> None:
        """Print the short usage summary shown after argument errors."""
        self.console.print("Usage: goreplace <partial-package-name>", style="blue")
        self.console.print(
            "Searches for matching dependencies in go.mod and replaces them "
            "with local path if found."
        )
        self.console.print()
        self.console.print("Example:", style="yellow")
        self.console.print("  goreplace proto")
