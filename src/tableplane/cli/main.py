"""TablePlane CLI - tpl command."""

from pathlib import Path

import click

from tableplane.cli.clear import clear_command
from tableplane.cli.index import index_command
from tableplane.cli.serve import serve_command
from tableplane.cli.status import status_command
from tableplane.cli.view import view_command


@click.group()
@click.version_option(version="0.1.0", prog_name="tpl")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ./tableplane.yaml when present)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """TablePlane - query a git-backed markdown database as tables."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path


cli.add_command(index_command, name="index")
cli.add_command(serve_command, name="serve")
cli.add_command(view_command, name="view")
cli.add_command(status_command, name="status")
cli.add_command(clear_command, name="clear")


if __name__ == "__main__":
    cli()
