"""Query module - read-side access to indexed tables and views."""

from tableplane.query.formats import OutputFormat
from tableplane.query.ops import QueryService

__all__ = ["OutputFormat", "QueryService"]
