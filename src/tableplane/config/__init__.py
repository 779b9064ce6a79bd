"""Config module exports."""

from tableplane.config.loader import load_config
from tableplane.config.models import (
    DatabaseConfig,
    IndexerConfig,
    LoggingConfig,
    RepositoryConfig,
    ServerConfig,
    TablePlaneConfig,
)

__all__ = [
    "load_config",
    "DatabaseConfig",
    "IndexerConfig",
    "LoggingConfig",
    "RepositoryConfig",
    "ServerConfig",
    "TablePlaneConfig",
]
