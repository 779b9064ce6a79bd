"""Spreadsheet formula evaluation backed by the ``formulas`` library.

The matrix itself is the sheet: row 1 is the header, A1-style references
and ranges resolve against it, and referenced formula cells are evaluated
on demand.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import formulas
import numpy as np

from tableplane.core.errors import FormulaError
from tableplane.views.formula import (
    Matrix,
    column_letter,
    column_number,
    parse_currency,
    parse_number,
)

DEFAULT_PRECISION = 14

_ENDPOINT_RE = re.compile(r"([A-Z]*)(\d*)")


class FormulaEvaluator(Protocol):
    """Computes the display value of the formula cell at (row, col), 0-indexed."""

    def evaluate(self, row: int, col: int) -> str: ...


def literal_value(cell: str) -> Any:
    """Value a non-formula cell contributes when referenced."""
    text = cell.strip()
    if not text:
        return 0
    number = parse_number(text)
    if number is not None:
        return number
    currency = parse_currency(text)
    if currency is not None:
        return currency
    if text.upper() in ("TRUE", "FALSE"):
        return text.upper() == "TRUE"
    return cell


def format_value(value: Any, precision: int = DEFAULT_PRECISION) -> str:
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return "#NUM!"
        rounded = round(value, precision)
        if rounded.is_integer():
            return str(int(rounded))
        return repr(rounded)
    return str(value)


def _scalar(result: Any) -> Any:
    array = np.asarray(result, dtype=object)
    if array.size == 0:
        return 0
    return array.ravel()[0]


class SheetEvaluator:
    """Evaluates formula cells of one matrix, memoizing computed values."""

    def __init__(self, matrix: Matrix, *, precision: int = DEFAULT_PRECISION) -> None:
        self._matrix = matrix
        self._precision = precision
        self._row_count = len(matrix)
        self._col_count = max((len(row) for row in matrix), default=0)
        self._values: dict[tuple[int, int], Any] = {}
        self._active: set[tuple[int, int]] = set()
        self._compiled: dict[str, Callable[..., Any]] = {}

    @classmethod
    def from_options(cls, matrix: Matrix, options: Mapping[str, Any] | None) -> SheetEvaluator:
        precision = (options or {}).get("precisionRounding", DEFAULT_PRECISION)
        return cls(matrix, precision=int(precision))

    def evaluate(self, row: int, col: int) -> str:
        return format_value(self._value(row, col), self._precision)

    def _value(self, row: int, col: int) -> Any:
        if not (0 <= row < self._row_count and 0 <= col < len(self._matrix[row])):
            return 0
        key = (row, col)
        if key in self._values:
            return self._values[key]

        cell = self._matrix[row][col]
        if not cell.startswith("="):
            value = literal_value(cell)
        else:
            if key in self._active:
                raise FormulaError.circular_reference(f"{column_letter(col + 1)}{row + 1}")
            self._active.add(key)
            try:
                value = self._compute(cell)
            finally:
                self._active.discard(key)
        self._values[key] = value
        return value

    def _compute(self, formula: str) -> Any:
        func = self._compiled.get(formula)
        if func is None:
            func = formulas.Parser().ast(formula)[1].compile()
            self._compiled[formula] = func
        args = [self._reference(ref) for ref in func.inputs]
        return _scalar(func(*args))

    def _reference(self, ref: str) -> Any:
        ref = ref.split("!")[-1].replace("$", "").upper()
        if ":" not in ref:
            row, col = self._endpoint(ref, default_row=1, default_col=1)
            return self._value(row - 1, col - 1)

        start, end = ref.split(":", 1)
        r1, c1 = self._endpoint(start, default_row=1, default_col=1)
        r2, c2 = self._endpoint(end, default_row=self._row_count, default_col=self._col_count)
        rows = range(min(r1, r2), max(r1, r2) + 1)
        cols = range(min(c1, c2), max(c1, c2) + 1)
        values = [[self._value(r - 1, c - 1) for c in cols] for r in rows]
        array = np.empty((len(rows), len(cols)), dtype=object)
        for i, row_values in enumerate(values):
            for j, value in enumerate(row_values):
                array[i, j] = value
        return array

    @staticmethod
    def _endpoint(text: str, *, default_row: int, default_col: int) -> tuple[int, int]:
        match = _ENDPOINT_RE.fullmatch(text)
        if match is None or not (match.group(1) or match.group(2)):
            raise FormulaError.evaluation_failed(text, "unsupported reference")
        col = column_number(match.group(1)) if match.group(1) else default_col
        row = int(match.group(2)) if match.group(2) else default_row
        return row, col
