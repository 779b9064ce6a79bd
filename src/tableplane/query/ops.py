"""Read-side queries over the index: tables, documents and views."""

from __future__ import annotations

from typing import Any

from tableplane.core.errors import NotFoundError
from tableplane.index.layout import TableLayout, natural_key
from tableplane.index.models import FileIndex
from tableplane.index.parser import MarkdownParser
from tableplane.index.store import DocumentStore
from tableplane.query.formats import OutputFormat
from tableplane.views.export import render_html_table, write_xlsx
from tableplane.views.formula import (
    Matrix,
    evaluate_matrix,
    formatting_matrix,
    substitute_matrix,
)
from tableplane.views.projector import Aggregates, ViewProjector


class QueryService:
    """Answers every read the HTTP and CLI surfaces expose."""

    def __init__(
        self,
        store: DocumentStore,
        layout: TableLayout,
        parser: MarkdownParser | None = None,
        projector: ViewProjector | None = None,
    ) -> None:
        self.store = store
        self.layout = layout
        self.parser = parser or MarkdownParser()
        self.projector = projector or ViewProjector(store, layout)

    # =========================================================================
    # Documents
    # =========================================================================

    def tables(self) -> list[str]:
        return self.store.tables()

    def table_files(self, table: str, *, data_only: bool = False) -> list[str]:
        return sorted(self.store.files(table, data_only=data_only), key=natural_key)

    def file_index(self, table: str, file: str) -> FileIndex:
        file_index = self.store.get_file_index(table, file)
        if file_index is None:
            raise NotFoundError.file_index_missing(table, file)
        return file_index

    def file_content(
        self, table: str, file: str, fmt: OutputFormat | str
    ) -> str | dict[str, Any]:
        """A stored document rendered as markdown or html, or its raw tree for json."""
        output = fmt if isinstance(fmt, OutputFormat) else OutputFormat.parse(fmt)
        record = self.file_index(table, file).record
        if output is OutputFormat.MARKDOWN:
            return self.parser.render_markdown(record)
        if output is OutputFormat.HTML:
            return self.parser.render_html(record)
        return record

    def table_data(self, table: str) -> list[dict[str, Any]]:
        indices = self.store.find_file_indices(table, data_only=True)
        indices.sort(key=lambda fi: natural_key(fi.file))
        return [
            {
                "file": fi.file,
                "git_hash": fi.git_hash,
                "sha256": fi.sha256,
                "date": fi.date.isoformat(),
                "record": fi.record,
            }
            for fi in indices
        ]

    def table_paths(self, table: str) -> list[str]:
        return self.store.paths(table)

    def path_values(self, table: str, path: str) -> dict[str, str]:
        return self.projector.path_values(table, path)

    # =========================================================================
    # Views
    # =========================================================================

    def view_definition(self, table: str) -> dict[str, Any]:
        return self.projector.view_definition(table).to_dict()

    def rendered_view(self, table: str) -> Aggregates:
        return self.projector.rendered_view(table)

    def condensed_view(self, table: str) -> Matrix:
        return self.projector.condensed_view(table)

    def evaluated_view(self, table: str) -> Matrix:
        """Condensed view with position tokens substituted and formulas computed."""
        view = self.projector.view_definition(table)
        condensed = self.projector.condensed_view(table)
        return evaluate_matrix(substitute_matrix(condensed), view.options.formula)

    def html_view(self, table: str) -> str:
        view = self.projector.view_definition(table)
        return render_html_table(self.evaluated_view(table), view.options.html)

    def xlsx_view(self, table: str) -> bytes:
        condensed = self.projector.condensed_view(table)
        return write_xlsx(
            substitute_matrix(condensed),
            formatting_matrix(condensed),
            sheet_name=table,
        )

    # =========================================================================
    # Status
    # =========================================================================

    def index_status(self) -> dict[str, Any]:
        tracker = self.store.get_tracker()
        if tracker is None:
            return {"indexing_version": self.store.indexing_version, "indexed": False}
        return {
            "indexing_version": tracker.indexing_version,
            "indexed": True,
            "revision": tracker.git_hash,
            "date": tracker.date.isoformat(),
            "changes": len(tracker.changes),
            "failed": list(tracker.failed),
        }
