"""Tests for request-id middleware and error responses."""

from __future__ import annotations

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from tableplane.core.errors import (
    ConfigError,
    ErrorCode,
    NotFoundError,
    StoreError,
    TablePlaneError,
    ValidationError,
)
from tableplane.core.logging import get_request_id
from tableplane.daemon.middleware import (
    REQUEST_ID_HEADER,
    RequestIdMiddleware,
    handle_tableplane_error,
    status_for,
)


def _make_app() -> Starlette:
    async def echo(request: Request) -> JSONResponse:
        _ = request
        return JSONResponse({"request_id": get_request_id()})

    async def missing(request: Request) -> JSONResponse:
        raise NotFoundError.table_missing(request.path_params["table"])

    async def crash(request: Request) -> JSONResponse:
        _ = request
        raise RuntimeError("kaboom")

    app = Starlette(
        routes=[
            Route("/echo", echo),
            Route("/missing/{table}", missing),
            Route("/crash", crash),
        ],
        exception_handlers={TablePlaneError: handle_tableplane_error},
    )
    app.add_middleware(RequestIdMiddleware)
    return app


@pytest.fixture
def client() -> TestClient:
    return TestClient(_make_app())


class TestStatusFor:
    """Error to HTTP status mapping."""

    def test_validation_is_400(self) -> None:
        assert status_for(ValidationError.invalid_format("pdf", ["json"])) == 400

    def test_not_found_is_404(self) -> None:
        assert status_for(NotFoundError.table_missing("films")) == 404

    def test_lock_held_is_409(self) -> None:
        assert status_for(StoreError.lock_held("index-run", "pid-1")) == 409

    def test_other_errors_are_500(self) -> None:
        assert status_for(ConfigError.malformed_path("a/b/c.md")) == 500


class TestRequestIdMiddleware:
    """Correlation ids and unhandled failures."""

    def test_given_header_when_requested_then_id_bound_and_echoed(self, client: TestClient) -> None:
        response = client.get("/echo", headers={REQUEST_ID_HEADER: "req-123"})

        assert response.json() == {"request_id": "req-123"}
        assert response.headers[REQUEST_ID_HEADER] == "req-123"

    def test_given_no_header_when_requested_then_id_generated(self, client: TestClient) -> None:
        response = client.get("/echo")

        generated = response.headers[REQUEST_ID_HEADER]
        assert generated
        assert response.json() == {"request_id": generated}

    def test_given_domain_error_when_raised_then_structured_response(
        self, client: TestClient
    ) -> None:
        response = client.get("/missing/films")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == ErrorCode.NOT_FOUND_TABLE.value
        assert error["details"] == {"table": "films"}
        assert REQUEST_ID_HEADER in response.headers

    def test_given_unexpected_exception_when_raised_then_internal_error(
        self, client: TestClient
    ) -> None:
        response = client.get("/crash")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["error"] == "INTERNAL_ERROR"
        assert "kaboom" in error["message"]
