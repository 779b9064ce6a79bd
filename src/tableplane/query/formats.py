"""Output formats for single-document queries."""

from __future__ import annotations

from enum import Enum

from tableplane.core.errors import ValidationError


class OutputFormat(str, Enum):
    """How a stored document is returned to a caller."""

    MARKDOWN = "markdown"
    HTML = "html"
    JSON = "json"

    @classmethod
    def parse(cls, value: str) -> OutputFormat:
        """Case-insensitive lookup.

        Raises:
            ValidationError: If ``value`` names no known format.
        """
        try:
            return cls(value.strip().lower())
        except ValueError as e:
            raise ValidationError.invalid_format(value, [f.value for f in cls]) from e

    @property
    def media_type(self) -> str:
        return {
            OutputFormat.MARKDOWN: "text/markdown; charset=utf-8",
            OutputFormat.HTML: "text/html; charset=utf-8",
            OutputFormat.JSON: "application/json",
        }[self]
