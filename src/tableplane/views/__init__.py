"""Views module - projecting indexed facts into tables and evaluating formulas."""

from tableplane.views.formula import (
    column_letter,
    evaluate_matrix,
    extract_formatting,
    formatting_matrix,
    substitute_matrix,
    substitute_variables,
)
from tableplane.views.models import ViewDefinition, ViewOptions
from tableplane.views.projector import ViewProjector, build_view, condense, group_by_file

__all__ = [
    "ViewDefinition",
    "ViewOptions",
    "ViewProjector",
    "build_view",
    "column_letter",
    "condense",
    "evaluate_matrix",
    "extract_formatting",
    "formatting_matrix",
    "group_by_file",
    "substitute_matrix",
    "substitute_variables",
]
