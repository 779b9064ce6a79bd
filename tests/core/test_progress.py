"""Tests for core/progress.py module.

Covers:
- status() function
- pluralize() function
- matrix_table() function
"""

from __future__ import annotations

from io import StringIO

import pytest
from rich.console import Console

from tableplane.core.progress import _STYLES, get_console, matrix_table, pluralize, status


class TestStyles:
    """Tests for style prefixes."""

    def test_known_styles(self) -> None:
        assert set(_STYLES) == {"success", "error", "warning", "info", "none"}


class TestStatus:
    """Tests for status function."""

    def test_writes_message_with_indent(self, monkeypatch: pytest.MonkeyPatch) -> None:
        buffer = StringIO()
        console = Console(file=buffer, force_terminal=False, width=120)
        monkeypatch.setattr("tableplane.core.progress._console", console)

        status("Indexed", style="success", indent=2)

        assert buffer.getvalue() == "  ✓ Indexed\n"

    def test_shared_console_writes_to_stderr(self) -> None:
        assert get_console().stderr is True


class TestPluralize:
    """Tests for pluralize function."""

    @pytest.mark.parametrize(
        ("count", "expected"), [(0, "0 files"), (1, "1 file"), (2, "2 files")]
    )
    def test_regular_plural(self, count: int, expected: str) -> None:
        assert pluralize(count, "file") == expected

    def test_irregular_plural(self) -> None:
        assert pluralize(3, "index", "indices") == "3 indices"


class TestMatrixTable:
    """Tests for matrix_table function."""

    def test_header_and_rows(self) -> None:
        table = matrix_table([["Title", "Year"], ["Dune", "1965"]], title="books")

        headers = [str(column.header) for column in table.columns]
        assert headers == ["Title", "Year"]
        assert table.row_count == 1
        assert table.title == "books"

    def test_markup_in_cells_printed_literally(self) -> None:
        buffer = StringIO()
        console = Console(file=buffer, force_terminal=False, width=80)

        console.print(matrix_table([["Note"], ["[red]hot[/red]"]]))

        assert "[red]hot[/red]" in buffer.getvalue()

    def test_empty_matrix_has_no_columns(self) -> None:
        assert matrix_table([]).columns == []
