"""Tests for the spreadsheet evaluator."""

from __future__ import annotations

import numpy as np
import pytest

from tableplane.core.errors import ErrorCode, FormulaError
from tableplane.views.evaluator import SheetEvaluator, format_value, literal_value


class TestLiteralValue:
    """What a plain cell contributes when referenced."""

    @pytest.mark.parametrize(
        ("cell", "expected"),
        [("", 0), ("  ", 0), ("12", 12), ("2.5", 2.5), ("$1,000", 1000.0), ("true", True)],
    )
    def test_given_literal_when_read_then_typed(self, cell: str, expected: object) -> None:
        assert literal_value(cell) == expected

    def test_given_text_when_read_then_kept_as_written(self) -> None:
        assert literal_value(" Dune ") == " Dune "


class TestFormatValue:
    """Display text for computed values."""

    def test_integral_float_drops_fraction(self) -> None:
        assert format_value(6.0) == "6"

    def test_float_rounded_to_precision(self) -> None:
        assert format_value(0.1 + 0.2) == "0.3"
        assert format_value(1 / 3, precision=2) == "0.33"

    def test_numpy_scalar_unwrapped(self) -> None:
        assert format_value(np.float64(2.5)) == "2.5"

    def test_booleans_spreadsheet_style(self) -> None:
        assert format_value(True) == "TRUE"

    def test_non_finite_is_num_error(self) -> None:
        assert format_value(float("inf")) == "#NUM!"


class TestSheetEvaluator:
    """References resolve against the matrix itself."""

    def test_given_arithmetic_when_evaluated_then_value(self) -> None:
        evaluator = SheetEvaluator([["=1+2"]])

        assert evaluator.evaluate(0, 0) == "3"

    def test_given_cell_reference_when_evaluated_then_literal_used(self) -> None:
        matrix = [["Price", "Double"], ["21", "=A2*2"]]

        assert SheetEvaluator(matrix).evaluate(1, 1) == "42"

    def test_given_currency_reference_when_evaluated_then_numeric(self) -> None:
        matrix = [["Price", "Plus"], ["$1,200.50", "=A2+1"]]

        assert SheetEvaluator(matrix).evaluate(1, 1) == "1201.5"

    def test_given_empty_reference_when_evaluated_then_zero(self) -> None:
        matrix = [["A", "B"], ["", "=A2+1"]]

        assert SheetEvaluator(matrix).evaluate(1, 1) == "1"

    def test_given_reference_outside_matrix_when_evaluated_then_zero(self) -> None:
        assert SheetEvaluator([["=Z99+5"]]).evaluate(0, 0) == "5"

    def test_given_range_when_summed_then_total(self) -> None:
        matrix = [["N", "Sum"], ["1", ""], ["2", ""], ["3", "=SUM(A2:A4)"]]

        assert SheetEvaluator(matrix).evaluate(3, 1) == "6"

    def test_given_chained_formulas_when_evaluated_then_dependencies_computed(self) -> None:
        matrix = [["=B1+1", "=C1*2", "5"]]

        assert SheetEvaluator(matrix).evaluate(0, 0) == "11"

    def test_given_self_reference_when_evaluated_then_circular_error(self) -> None:
        matrix = [["=B1", "=A1"]]

        with pytest.raises(FormulaError) as exc_info:
            SheetEvaluator(matrix).evaluate(0, 0)

        assert exc_info.value.code is ErrorCode.FORMULA_CIRCULAR_REFERENCE

    def test_given_precision_option_when_built_then_applied(self) -> None:
        evaluator = SheetEvaluator.from_options([["=1/3"]], {"precisionRounding": 3})

        assert evaluator.evaluate(0, 0) == "0.333"

    def test_given_spreadsheet_error_when_evaluated_then_error_text(self) -> None:
        assert SheetEvaluator([["=1/0"]]).evaluate(0, 0) == "#DIV/0!"
