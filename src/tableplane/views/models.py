"""View definition: per-table map from FileNode path to output column."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from tableplane.config.constants import VIEW_VERSION
from tableplane.core.errors import ConfigError

logger = structlog.get_logger()


class ViewOptions(BaseModel):
    """Rendering options; unknown keys are kept for export adapters."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    include_file_name: bool = Field(default=True, alias="includeFileName")
    formula: dict[str, Any] | None = None
    sheet: dict[str, Any] | None = None
    html: dict[str, Any] | None = None
    excel: dict[str, Any] | None = None

    @field_validator("formula")
    @classmethod
    def validate_formula(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        precision = (v or {}).get("precisionRounding")
        if isinstance(precision, bool) or not isinstance(precision, int | None):
            raise ValueError("precisionRounding must be an integer")
        return v


class ViewDefinition(BaseModel):
    """Contents of ``<table>/view.json``.

    ``columns`` keeps declaration order; that order is the header order of
    every projected view.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: int = VIEW_VERSION
    options: ViewOptions = Field(default_factory=ViewOptions)
    columns: dict[str, str] = Field(default_factory=dict)

    @property
    def paths(self) -> list[str]:
        return list(self.columns)

    @property
    def header(self) -> list[str]:
        return list(self.columns.values())

    @classmethod
    def default(cls) -> ViewDefinition:
        return cls()

    @classmethod
    def from_json(cls, text: str, table: str = "") -> ViewDefinition:
        """Parse view JSON.

        Raises:
            ConfigError: If the text is not JSON or does not fit the schema.
        """
        try:
            return cls.model_validate(json.loads(text))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            raise ConfigError.malformed_view(table, str(e)) from e

    @classmethod
    def load(cls, path: Path, table: str = "") -> ViewDefinition:
        """Read a view file, degrading to the default view when absent or malformed."""
        if not path.is_file():
            return cls.default()
        try:
            return cls.from_json(path.read_text(encoding="utf-8"), table)
        except ConfigError as e:
            logger.warning(
                "view_definition_malformed", table=table, path=str(path), error=e.message
            )
            return cls.default()

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
