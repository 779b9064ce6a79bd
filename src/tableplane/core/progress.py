"""User-facing CLI feedback: status markers and matrix tables via Rich."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

# Console for status output; data goes to stdout
_console = Console(stderr=True)

# Style prefixes
_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return "1 file" or "3 files"."""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


def matrix_table(matrix: Sequence[Sequence[str]], *, title: str | None = None) -> Table:
    """Rich table whose header is the matrix's first row."""
    table = Table(title=title, show_lines=False)
    if not matrix:
        return table
    for column in matrix[0]:
        table.add_column(Text(column), overflow="fold")
    for row in matrix[1:]:
        table.add_row(*(Text(cell) for cell in row))
    return table
