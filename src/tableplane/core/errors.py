"""TablePlane error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Not found
- 4xxx: Store
- 5xxx: Formula
- 6xxx: Validation
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MALFORMED_PATH = 2003
    CONFIG_MALFORMED_VIEW = 2004

    # Not found (3xxx)
    NOT_FOUND_FILE = 3001
    NOT_FOUND_FILE_INDEX = 3002
    NOT_FOUND_TABLE = 3003

    # Store (4xxx)
    STORE_OPERATION_FAILED = 4001
    STORE_LOCK_HELD = 4002

    # Formula (5xxx)
    FORMULA_EVALUATION_FAILED = 5001
    FORMULA_CIRCULAR_REFERENCE = 5002

    # Validation (6xxx)
    VALIDATION_INVALID_FORMAT = 6001
    VALIDATION_INVALID_PARAMETER = 6002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(eq=False)
class TablePlaneError(Exception):
    """Base error with structured context for query responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'NOT_FOUND_FILE')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(TablePlaneError):
    """Configuration and repository layout errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def malformed_path(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MALFORMED_PATH,
            message=f"Changed path is not of the form <table>/<file>: {path}",
            details={"path": path},
        )

    @classmethod
    def malformed_view(cls, table: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MALFORMED_VIEW,
            message=f"Malformed view definition for table '{table}': {reason}",
            details={"table": table, "reason": reason},
        )


class NotFoundError(TablePlaneError):
    """A file, index record or table does not exist."""

    @classmethod
    def file_missing(cls, table: str, file: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.NOT_FOUND_FILE,
            message=f"File not found: {table}/{file}",
            details={"table": table, "file": file},
        )

    @classmethod
    def file_index_missing(cls, table: str, file: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.NOT_FOUND_FILE_INDEX,
            message=f"No index record for {table}/{file}",
            details={"table": table, "file": file},
        )

    @classmethod
    def table_missing(cls, table: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.NOT_FOUND_TABLE,
            message=f"Table not found: {table}",
            details={"table": table},
        )


class StoreError(TablePlaneError):
    """Document store failures."""

    @classmethod
    def operation_failed(cls, operation: str, reason: str) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_OPERATION_FAILED,
            message=f"Store operation '{operation}' failed: {reason}",
            details={"operation": operation, "reason": reason},
        )

    @classmethod
    def lock_held(cls, name: str, owner: str) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_LOCK_HELD,
            message=f"Lock '{name}' is held by {owner}",
            retryable=True,
            details={"name": name, "owner": owner},
        )


class FormulaError(TablePlaneError):
    """Single-cell formula evaluation failures."""

    @classmethod
    def evaluation_failed(cls, cell: str, reason: str) -> "FormulaError":
        return cls(
            code=ErrorCode.FORMULA_EVALUATION_FAILED,
            message=f"Failed to evaluate {cell}: {reason}",
            details={"cell": cell, "reason": reason},
        )

    @classmethod
    def circular_reference(cls, cell: str) -> "FormulaError":
        return cls(
            code=ErrorCode.FORMULA_CIRCULAR_REFERENCE,
            message=f"Circular reference through {cell}",
            details={"cell": cell},
        )


class ValidationError(TablePlaneError):
    """Client input validation errors."""

    @classmethod
    def invalid_format(cls, value: str, allowed: list[str]) -> "ValidationError":
        return cls(
            code=ErrorCode.VALIDATION_INVALID_FORMAT,
            message=f"Unsupported output format '{value}', expected one of {', '.join(allowed)}",
            details={"value": value, "allowed": allowed},
        )

    @classmethod
    def invalid_parameter(cls, name: str, value: Any, reason: str) -> "ValidationError":
        return cls(
            code=ErrorCode.VALIDATION_INVALID_PARAMETER,
            message=f"Invalid parameter '{name}': {reason}",
            details={"name": name, "value": str(value), "reason": reason},
        )


class InternalError(TablePlaneError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
