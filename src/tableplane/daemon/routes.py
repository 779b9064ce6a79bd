"""HTTP routes for the TablePlane service.

Query endpoints are plain functions: Starlette runs them in its threadpool,
so SQLite reads never block the event loop.
"""

from __future__ import annotations

import importlib.metadata
import time
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, Response
from starlette.routing import Route

from tableplane.core.errors import ValidationError
from tableplane.query.formats import OutputFormat

if TYPE_CHECKING:
    from tableplane.daemon.indexer import BackgroundIndexer
    from tableplane.runtime import Runtime

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def _get_version() -> str:
    """Get package version from installed metadata."""
    try:
        return importlib.metadata.version("tableplane")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def parse_flag(request: Request, name: str) -> bool:
    """Read a boolean query parameter; absent means False."""
    raw = request.query_params.get(name)
    if raw is None:
        return False
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValidationError.invalid_parameter(name, raw, "expected true or false")


def create_routes(runtime: Runtime, indexer: BackgroundIndexer) -> list[Route]:
    """Create HTTP routes bound to a runtime and its background indexer."""
    start_time = time.time()
    version = _get_version()
    queries = runtime.queries

    async def health(request: Request) -> JSONResponse:
        """Liveness probe."""
        _ = request  # unused
        return JSONResponse(
            {
                "status": "healthy",
                "repo_root": str(runtime.repo.path),
                "version": version,
                "uptime_seconds": round(time.time() - start_time, 1),
            }
        )

    def status(request: Request) -> JSONResponse:
        """Index tracker plus background indexer state."""
        _ = request  # unused
        indexer_status = indexer.status
        last_stats = indexer_status.last_stats
        return JSONResponse(
            {
                "index": queries.index_status(),
                "indexer": {
                    "state": indexer_status.state.value,
                    "runs": indexer_status.runs,
                    "last_stats": last_stats.to_dict() if last_stats else None,
                    "last_error": indexer_status.last_error,
                },
            }
        )

    async def run_index(request: Request) -> JSONResponse:
        full = parse_flag(request, "full")
        stats = await indexer.run_once(full=full)
        return JSONResponse(stats.to_dict())

    def tables(request: Request) -> JSONResponse:
        _ = request  # unused
        return JSONResponse({"tables": queries.tables()})

    def table_files(request: Request) -> JSONResponse:
        table = request.path_params["table"]
        data_only = parse_flag(request, "dataOnly")
        files = queries.table_files(table, data_only=data_only)
        return JSONResponse({"table": table, "files": files})

    def table_data(request: Request) -> JSONResponse:
        table = request.path_params["table"]
        return JSONResponse({"table": table, "files": queries.table_data(table)})

    def file_content(request: Request) -> Response:
        table = request.path_params["table"]
        file = request.path_params["file"]
        fmt = OutputFormat.parse(request.path_params["format"])
        content = queries.file_content(table, file, fmt)
        if fmt is OutputFormat.JSON:
            return JSONResponse(content)
        return Response(content, media_type=fmt.media_type)

    def table_paths(request: Request) -> JSONResponse:
        table = request.path_params["table"]
        return JSONResponse({"table": table, "paths": queries.table_paths(table)})

    def path_values(request: Request) -> JSONResponse:
        table = request.path_params["table"]
        path = request.path_params["path"]
        values = queries.path_values(table, path)
        return JSONResponse({"table": table, "path": path, "values": values})

    def view(request: Request) -> JSONResponse:
        table = request.path_params["table"]
        payload: dict[str, Any] = {
            "table": table,
            "view": queries.view_definition(table),
            "rows": queries.rendered_view(table),
        }
        return JSONResponse(payload)

    def condensed(request: Request) -> JSONResponse:
        table = request.path_params["table"]
        return JSONResponse({"table": table, "rows": queries.condensed_view(table)})

    def evaluated(request: Request) -> JSONResponse:
        table = request.path_params["table"]
        return JSONResponse({"table": table, "rows": queries.evaluated_view(table)})

    def html(request: Request) -> HTMLResponse:
        return HTMLResponse(queries.html_view(request.path_params["table"]))

    def xlsx(request: Request) -> Response:
        table = request.path_params["table"]
        filename = quote(f"{table}.xlsx")
        return Response(
            queries.xlsx_view(table),
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
        )

    return [
        Route("/health", health, methods=["GET"]),
        Route("/status", status, methods=["GET"]),
        Route("/index", run_index, methods=["POST"]),
        Route("/tables", tables, methods=["GET"]),
        Route("/tables/{table}/files", table_files, methods=["GET"]),
        Route("/tables/{table}/data", table_data, methods=["GET"]),
        Route("/tables/{table}/files/{file}/{format}", file_content, methods=["GET"]),
        Route("/tables/{table}/paths", table_paths, methods=["GET"]),
        Route("/tables/{table}/paths/{path}", path_values, methods=["GET"]),
        Route("/views/{table}", view, methods=["GET"]),
        Route("/views/{table}/condensed", condensed, methods=["GET"]),
        Route("/views/{table}/evaluated", evaluated, methods=["GET"]),
        Route("/views/{table}/html", html, methods=["GET"]),
        Route("/views/{table}/xlsx", xlsx, methods=["GET"]),
    ]
