"""CLI utilities."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from tableplane.config.loader import load_config
from tableplane.config.models import TablePlaneConfig
from tableplane.core.errors import TablePlaneError
from tableplane.core.logging import configure_logging
from tableplane.git.errors import GitError
from tableplane.runtime import Runtime


def load_cli_config(ctx: click.Context) -> TablePlaneConfig:
    """Load config for the invoking command and configure logging from it.

    Raises:
        click.ClickException: If the config file is missing or invalid
    """
    obj = ctx.find_root().obj or {}
    config_path: Path | None = obj.get("config_path")
    try:
        config = load_config(config_path)
    except TablePlaneError as e:
        raise click.ClickException(str(e)) from e

    logging_config = config.logging
    if obj.get("verbose"):
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)
    return config


@contextmanager
def open_runtime(ctx: click.Context) -> Iterator[Runtime]:
    """Runtime for one command; domain errors surface as click errors."""
    config = load_cli_config(ctx)
    try:
        runtime = Runtime.from_config(config)
    except (TablePlaneError, GitError) as e:
        raise click.ClickException(str(e)) from e

    try:
        yield runtime
    except TablePlaneError as e:
        raise click.ClickException(str(e)) from e
    finally:
        runtime.close()
