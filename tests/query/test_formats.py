"""Tests for output format parsing."""

from __future__ import annotations

import pytest

from tableplane.core.errors import ErrorCode, ValidationError
from tableplane.query.formats import OutputFormat


class TestOutputFormat:
    """Format names accepted by document queries."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("markdown", OutputFormat.MARKDOWN),
            ("HTML", OutputFormat.HTML),
            (" json ", OutputFormat.JSON),
        ],
    )
    def test_given_known_name_when_parsed_then_format(
        self, value: str, expected: OutputFormat
    ) -> None:
        assert OutputFormat.parse(value) is expected

    def test_given_unknown_name_when_parsed_then_validation_error(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            OutputFormat.parse("pdf")

        assert exc_info.value.code is ErrorCode.VALIDATION_INVALID_FORMAT
        assert exc_info.value.details["allowed"] == ["markdown", "html", "json"]

    def test_media_types(self) -> None:
        assert OutputFormat.MARKDOWN.media_type.startswith("text/markdown")
        assert OutputFormat.HTML.media_type.startswith("text/html")
        assert OutputFormat.JSON.media_type == "application/json"
