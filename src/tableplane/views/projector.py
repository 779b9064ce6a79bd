"""View projection: FileNode facts -> per-file column maps -> condensed matrix."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from tableplane.core.errors import NotFoundError
from tableplane.index.layout import TableLayout, natural_key
from tableplane.index.models import FileNode
from tableplane.index.store import DocumentStore
from tableplane.views.models import ViewDefinition

Aggregates = dict[str, dict[str, str]]


def group_by_file(nodes: Iterable[FileNode]) -> Aggregates:
    """Group valued nodes into ``{file: {path: value}}`` with trimmed values."""
    grouped: Aggregates = {}
    for node in nodes:
        if node.value is None:
            continue
        grouped.setdefault(node.file, {})[node.path] = node.value.strip()
    return grouped


def build_view(view: ViewDefinition, aggregates: Mapping[str, Mapping[str, str]]) -> Aggregates:
    """Rename paths to column names; paths the view does not declare are dropped."""
    response: Aggregates = {}
    for file, values in aggregates.items():
        response[file] = {
            view.columns[path]: value for path, value in values.items() if path in view.columns
        }
    return response


def condense(view: ViewDefinition, response: Mapping[str, Mapping[str, str]]) -> list[list[str]]:
    """Header row plus one row per file, every row exactly as wide as the header."""
    header = view.header
    rows = [list(header)]
    for values in response.values():
        rows.append([values.get(column, "") for column in header])
    return rows


class ViewProjector:
    """Reads view definitions and indexed facts to build a table's views."""

    def __init__(self, store: DocumentStore, layout: TableLayout) -> None:
        self.store = store
        self.layout = layout

    def view_definition(self, table: str) -> ViewDefinition:
        return ViewDefinition.load(self.layout.view_path(table), table)

    def aggregate_by_file(self, table: str, paths: Iterable[str]) -> Aggregates:
        return group_by_file(self.store.find_file_nodes(table, paths, value_exists=True))

    def path_values(self, table: str, path: str) -> dict[str, str]:
        """Value of one path across every data file of a table."""
        aggregates = self._ordered(table, self.aggregate_by_file(table, [path]))
        return {file: values[path] for file, values in aggregates.items() if path in values}

    def rendered_view(self, table: str, view: ViewDefinition | None = None) -> Aggregates:
        """``{file: {column: value}}`` for every data file, in natural file order."""
        self._require_table(table)
        view = view or self.view_definition(table)
        aggregates = self.aggregate_by_file(table, view.paths)
        return build_view(view, self._ordered(table, aggregates))

    def condensed_view(self, table: str) -> list[list[str]]:
        view = self.view_definition(table)
        return condense(view, self.rendered_view(table, view))

    def _ordered(self, table: str, aggregates: Aggregates) -> Aggregates:
        # Data files with no matching facts still get a (blank) row.
        files = sorted(
            set(self.store.files(table, data_only=True)) | set(aggregates),
            key=natural_key,
        )
        return {file: aggregates.get(file, {}) for file in files}

    def _require_table(self, table: str) -> None:
        if not self.layout.has_table(table) and table not in self.store.tables():
            raise NotFoundError.table_missing(table)
