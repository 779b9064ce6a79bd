"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (TABLEPLANE__SECTION__KEY)
3. YAML config file (tableplane.yaml, or an explicit path)
4. Built-in defaults (this file)

Environment Variable Format:
    TABLEPLANE__<SECTION>__<KEY>=<VALUE>

Examples:
    TABLEPLANE__LOGGING__LEVEL=DEBUG
    TABLEPLANE__SERVER__PORT=8080
    TABLEPLANE__REPOSITORY__SUB_PATH=database
    TABLEPLANE__INDEXER__MAX_WORKERS=4
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from tableplane.config.constants import DEFAULT_DB_PATH, INDEXING_VERSION

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        TABLEPLANE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every indexed file.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class RepositoryConfig(BaseModel):
    """Git repository holding the markdown tables.

    Env vars:
        TABLEPLANE__REPOSITORY__PATH: Working tree of the repository
        TABLEPLANE__REPOSITORY__SUB_PATH: Database directory inside the repository
    """

    path: str = Field(
        default=".",
        description="Path to the git working tree.",
    )
    sub_path: str = Field(
        default="",
        description="Directory inside the repository whose subdirectories are tables. "
        "Empty means the repository root.",
    )

    @field_validator("sub_path")
    @classmethod
    def normalize_sub_path(cls, v: str) -> str:
        return v.strip().strip("/")


class ServerConfig(BaseModel):
    """Server configuration.

    Env vars:
        TABLEPLANE__SERVER__HOST: Bind address (default: 127.0.0.1)
        TABLEPLANE__SERVER__PORT: Port number (default: 7655)
        TABLEPLANE__SERVER__INDEX_ON_START: Run an index pass at startup
    """

    host: str = Field(
        default="127.0.0.1",
        description="Bind address. Use 0.0.0.0 for network access (security risk).",
    )
    port: int = Field(
        default=7655,
        description="Server port. Ensure firewall rules if exposing.",
    )
    index_on_start: bool = Field(
        default=True,
        description="Run one index pass when the server starts.",
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (0 <= v <= 65535):
            raise ValueError(f"Port must be 0-65535, got {v}")
        return v


class IndexerConfig(BaseModel):
    """Indexing run configuration.

    Env vars:
        TABLEPLANE__INDEXER__INDEXING_VERSION: Schema-compatibility tag
        TABLEPLANE__INDEXER__MAX_WORKERS: Parallel per-file workers
        TABLEPLANE__INDEXER__ISOLATE_FAILURES: Keep going when a file fails
        TABLEPLANE__INDEXER__SKIP_UNCHANGED: Skip re-parsing files whose hashes match
        TABLEPLANE__INDEXER__INTERVAL_SEC: Periodic reindex interval (0 disables)
    """

    indexing_version: str = Field(
        default=INDEXING_VERSION,
        description="Records from other versions are pruned on the next full rebuild.",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Parallel indexing workers. "
        "RISK: >1 may cause SQLite contention; recommended for SSDs only.",
    )
    isolate_failures: bool = Field(
        default=True,
        description="Collect per-file errors and re-queue failed files on the next run "
        "instead of aborting the batch.",
    )
    skip_unchanged: bool = Field(
        default=False,
        description="Skip re-parsing a file whose sha256 and blob hash match its stored record.",
    )
    lock_ttl_sec: float = Field(
        default=600.0,
        gt=0,
        description="Age after which an abandoned run lock is taken over.",
    )
    interval_sec: float = Field(
        default=0.0,
        ge=0,
        description="Periodic reindex interval for the server. 0 disables the loop.",
    )


class DatabaseConfig(BaseModel):
    """Database connection configuration.

    Env vars:
        TABLEPLANE__DATABASE__PATH: SQLite file (relative paths resolve against the repository)
        TABLEPLANE__DATABASE__BUSY_TIMEOUT_MS: SQLite busy timeout
        TABLEPLANE__DATABASE__MAX_RETRIES: Max retry attempts for locked DB
    """

    path: str = Field(
        default=DEFAULT_DB_PATH,
        description="SQLite database file.",
    )
    busy_timeout_ms: int = Field(
        default=30000,
        description="SQLite busy timeout (ms). How long to wait for locks. "
        "RISK: Too low causes failures under contention; too high delays errors.",
    )
    max_retries: int = Field(
        default=3,
        description="Max retry attempts for locked database errors.",
    )
    retry_base_delay_sec: float = Field(
        default=0.1,
        description="Base delay between retries (exponential backoff).",
    )


class TablePlaneConfig(BaseModel):
    """Root configuration for TablePlane.

    All settings can be configured via:
    1. Environment variables: TABLEPLANE__SECTION__KEY
    2. A YAML config file
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    indexer: IndexerConfig = Field(default_factory=IndexerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @property
    def repo_root(self) -> Path:
        return Path(self.repository.path).expanduser().resolve()

    @property
    def db_path(self) -> Path:
        path = Path(self.database.path).expanduser()
        return path if path.is_absolute() else self.repo_root / path
