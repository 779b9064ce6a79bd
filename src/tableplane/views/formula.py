"""Formula substitution and evaluation over string matrices.

Every function here is pure: the result depends only on the arguments.

Cell syntax:
- ``=<expr>``: a formula
- ``!&&<format>&&<cell>``: a cell with an explicit display format
- ``$<n>`` / ``-$<n>``: a currency literal
- anything else: plain text

Formulas may use ``{{NAME}}``, ``{{NAME+K}}`` and ``{{NAME-K}}`` tokens for
the cell's position: CURRENT_ROW, CURRENT_COLUMN, CURRENT_COLUMN_LETTER
and ROW_COUNT (1-indexed, header row included).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, NotRequired, TypedDict

import structlog

from tableplane.config.constants import ERROR_SENTINEL

if TYPE_CHECKING:
    from tableplane.views.evaluator import FormulaEvaluator

logger = structlog.get_logger()

Matrix = list[list[str]]

_TOKEN_RE = re.compile(r"\{\{([A-Za-z_][A-Za-z0-9_]*)([+-]\d+)?\}\}")
_FORMAT_RE = re.compile(r"!&&(.+?)&&(.+)")
_CURRENCY_RE = re.compile(r"(-?)\$(\d[\d,]*(?:\.\d+)?|\.\d+)")
_NUMBER_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


class FormattedFormula(TypedDict):
    formula: str
    formatting: NotRequired[str]


def column_letter(n: int) -> str:
    """1-indexed spreadsheet column name (1 -> A, 27 -> AA); n < 1 gives A."""
    if n < 1:
        return "A"
    letters = []
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        letters.append(chr(ord("A") + remainder))
    return "".join(reversed(letters))


def column_number(letters: str) -> int:
    """Inverse of column_letter."""
    n = 0
    for char in letters.upper():
        n = n * 26 + (ord(char) - ord("A") + 1)
    return n


def cell_variables(row_index: int, col_index: int, row_count: int) -> dict[str, int]:
    """Base variables for the cell at 0-indexed (row_index, col_index)."""
    return {
        "CURRENT_COLUMN": col_index + 1,
        "CURRENT_ROW": row_index + 1,
        "ROW_COUNT": row_count,
    }


def variables(base: Mapping[str, Any]) -> dict[str, str]:
    """Bare ``{{NAME}}`` tokens and their replacements for a set of base variables."""
    result = {f"{{{{{name}}}}}": str(value) for name, value in base.items()}
    result["{{CURRENT_COLUMN_LETTER}}"] = column_letter(_as_int(base.get("CURRENT_COLUMN")))
    return result


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def substitute_variables(formula: str, base: Mapping[str, Any]) -> str:
    """Replace position tokens in one formula.

    Row and column numbers clamp to 1 after applying an offset, and so does
    the column number behind CURRENT_COLUMN_LETTER. ROW_COUNT is not
    clamped. A caller-supplied integer variable accepts offsets too;
    unknown tokens are left as written.
    """

    def replace(match: re.Match[str]) -> str:
        name, offset_text = match.group(1), match.group(2)
        offset = int(offset_text) if offset_text else 0
        if name in ("CURRENT_ROW", "CURRENT_COLUMN"):
            return str(max(1, _as_int(base.get(name)) + offset))
        if name == "CURRENT_COLUMN_LETTER":
            return column_letter(max(1, _as_int(base.get("CURRENT_COLUMN")) + offset))
        if name == "ROW_COUNT":
            return str(_as_int(base.get(name)) + offset)
        if name not in base:
            return match.group(0)
        value = base[name]
        if offset_text is None:
            return str(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value + offset)
        return match.group(0)

    return _TOKEN_RE.sub(replace, formula)


def extract_formatting(cell: str) -> FormattedFormula:
    """Split ``!&&<format>&&<formula>``; anything else comes back unchanged."""
    match = _FORMAT_RE.fullmatch(cell)
    if match is None:
        return {"formula": cell}
    return {"formula": match.group(2), "formatting": match.group(1)}


def formatting_matrix(matrix: Matrix) -> list[list[str | None]]:
    """Per-cell display format, or None where a cell declares none."""
    return [[extract_formatting(cell).get("formatting") for cell in row] for row in matrix]


def parse_number(text: str) -> int | float | None:
    """Numeric value of a plain number literal, else None."""
    text = text.strip()
    if not _NUMBER_RE.fullmatch(text):
        return None
    number = float(text)
    if number.is_integer() and "." not in text and "e" not in text.lower():
        return int(number)
    return number


def parse_currency(text: str) -> float | None:
    """Numeric value of a ``$1,200.50`` / ``-$3`` literal, else None."""
    match = _CURRENCY_RE.fullmatch(text.strip())
    if match is None:
        return None
    value = float(match.group(2).replace(",", ""))
    return -value if match.group(1) else value


def substitute_matrix(matrix: Matrix) -> Matrix:
    """Resolve position tokens in every formula cell.

    Every cell loses its ``!&&format&&`` prefix; the format itself is
    recovered separately through ``formatting_matrix``.
    """
    row_count = len(matrix)
    result: Matrix = []
    for row_index, row in enumerate(matrix):
        new_row = []
        for col_index, cell in enumerate(row):
            formula = extract_formatting(cell)["formula"]
            if formula.startswith("="):
                base = cell_variables(row_index, col_index, row_count)
                new_row.append(substitute_variables(formula, base))
            else:
                new_row.append(formula)
        result.append(new_row)
    return result


def evaluate_matrix(
    matrix: Matrix,
    options: Mapping[str, Any] | None = None,
    *,
    evaluator: FormulaEvaluator | None = None,
) -> Matrix:
    """Replace each formula cell with its computed value.

    A cell whose evaluation raises becomes the error sentinel; the rest of
    the matrix is still evaluated.
    """
    if evaluator is None:
        from tableplane.views.evaluator import SheetEvaluator

        evaluator = SheetEvaluator.from_options(matrix, options)

    result: Matrix = []
    for row_index, row in enumerate(matrix):
        new_row = []
        for col_index, cell in enumerate(row):
            if not cell.startswith("="):
                new_row.append(cell)
                continue
            try:
                new_row.append(evaluator.evaluate(row_index, col_index))
            except Exception as e:
                logger.warning(
                    "formula_cell_failed",
                    cell=f"{column_letter(col_index + 1)}{row_index + 1}",
                    formula=cell,
                    error=str(e),
                )
                new_row.append(ERROR_SENTINEL)
        result.append(new_row)
    return result
