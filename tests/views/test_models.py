"""Tests for view definitions."""

from __future__ import annotations

from pathlib import Path

import pytest

from tableplane.core.errors import ConfigError, ErrorCode
from tableplane.views.models import ViewDefinition


class TestViewDefinition:
    """Parsing and defaults."""

    def test_given_json_when_parsed_then_columns_keep_declaration_order(self) -> None:
        view = ViewDefinition.from_json(
            '{"version": 2, "columns": {"p.year": "Year", "p.title": "Title"}}'
        )

        assert view.paths == ["p.year", "p.title"]
        assert view.header == ["Year", "Title"]

    def test_given_camel_case_options_when_parsed_then_exposed_and_round_tripped(self) -> None:
        view = ViewDefinition.from_json(
            '{"options": {"includeFileName": false, "formula": {"precisionRounding": 4}}}'
        )

        assert view.options.include_file_name is False
        assert view.options.formula == {"precisionRounding": 4}
        assert view.to_dict()["options"]["includeFileName"] is False

    def test_given_unknown_option_when_parsed_then_kept(self) -> None:
        view = ViewDefinition.from_json('{"options": {"pdf": {"landscape": true}}}')

        assert view.to_dict()["options"]["pdf"] == {"landscape": True}

    def test_default_has_no_columns_and_includes_file_name(self) -> None:
        view = ViewDefinition.default()

        assert view.columns == {}
        assert view.options.include_file_name is True

    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            '{"columns": ["a", "b"]}',
            '{"options": {"formula": {"precisionRounding": "x"}}}',
        ],
    )
    def test_given_malformed_text_when_parsed_then_config_error(self, text: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            ViewDefinition.from_json(text, "books")

        assert exc_info.value.code is ErrorCode.CONFIG_MALFORMED_VIEW


class TestLoad:
    """Reading view.json from a table directory."""

    def test_given_missing_file_when_loaded_then_default(self, tmp_path: Path) -> None:
        assert ViewDefinition.load(tmp_path / "view.json") == ViewDefinition.default()

    def test_given_malformed_file_when_loaded_then_default(self, tmp_path: Path) -> None:
        path = tmp_path / "view.json"
        path.write_text("{broken")

        assert ViewDefinition.load(path, "books") == ViewDefinition.default()

    def test_given_valid_file_when_loaded_then_parsed(self, tmp_path: Path) -> None:
        path = tmp_path / "view.json"
        path.write_text('{"columns": {"p.title": "Title"}}')

        assert ViewDefinition.load(path).columns == {"p.title": "Title"}
