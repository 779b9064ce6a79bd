"""Core module exports."""

from tableplane.core.errors import (
    ConfigError,
    ErrorCode,
    FormulaError,
    InternalError,
    NotFoundError,
    StoreError,
    TablePlaneError,
    ValidationError,
)
from tableplane.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "FormulaError",
    "InternalError",
    "NotFoundError",
    "StoreError",
    "TablePlaneError",
    "ValidationError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
