"""Export adapters for condensed views: HTML tables and xlsx workbooks."""

from __future__ import annotations

import html
import re
from collections.abc import Mapping, Sequence
from io import BytesIO
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font

from tableplane.config.constants import CURRENCY_FORMAT
from tableplane.views.formula import Matrix, extract_formatting, parse_currency, parse_number

_SHEET_TITLE_INVALID = re.compile(r"[\[\]:*?/\\]")


def render_html_table(matrix: Matrix, options: Mapping[str, Any] | None = None) -> str:
    """Render a matrix as an HTML table.

    Options:
        id: ``id`` attribute of the table element
        header: render the first row as ``<thead>`` (default True)
    """
    options = options or {}
    with_header = bool(options.get("header", True))
    table_id = options.get("id")

    open_tag = f'<table id="{html.escape(str(table_id))}">' if table_id else "<table>"
    parts = [open_tag]
    rows = list(matrix)
    if with_header and rows:
        cells = "".join(f"<th>{html.escape(cell)}</th>" for cell in rows[0])
        parts.append(f"<thead><tr>{cells}</tr></thead>")
        rows = rows[1:]
    parts.append("<tbody>")
    for row in rows:
        cells = "".join(f"<td>{html.escape(cell)}</td>" for cell in row)
        parts.append(f"<tr>{cells}</tr>")
    parts.append("</tbody></table>")
    return "".join(parts)


def sheet_title(name: str) -> str:
    return _SHEET_TITLE_INVALID.sub("_", name)[:31] or "Sheet1"


def write_xlsx(
    matrix: Matrix,
    formatting: Sequence[Sequence[str | None]] | None = None,
    *,
    sheet_name: str = "Sheet1",
) -> bytes:
    """Build a one-sheet workbook.

    The header row is bold. Formula cells stay formulas so the workbook
    recalculates on open; number and currency literals become numeric cells,
    the latter in currency format; an explicit ``!&&format&&`` wins over both.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title(sheet_name)
    bold = Font(bold=True)

    for row_index, row in enumerate(matrix):
        for col_index, raw in enumerate(row):
            cell = sheet.cell(row=row_index + 1, column=col_index + 1)
            text = extract_formatting(raw)["formula"]
            if row_index == 0:
                cell.value = text
                cell.font = bold
                continue

            currency = None if text.startswith("=") else parse_currency(text)
            number = None if text.startswith("=") else parse_number(text)
            if currency is not None:
                cell.value = currency
                cell.number_format = CURRENCY_FORMAT
            elif number is not None:
                cell.value = number
            else:
                cell.value = text

            number_format = _format_at(formatting, row_index, col_index)
            if number_format:
                cell.number_format = number_format

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _format_at(
    formatting: Sequence[Sequence[str | None]] | None, row_index: int, col_index: int
) -> str | None:
    if formatting is None or row_index >= len(formatting):
        return None
    row = formatting[row_index]
    return row[col_index] if col_index < len(row) else None
