"""tpl status command - show the last indexed revision."""

import json

import click

from tableplane.cli.utils import open_runtime


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def status_command(ctx: click.Context, as_json: bool) -> None:
    """Show the index tracker and the tables in the store."""
    with open_runtime(ctx) as runtime:
        index_status = runtime.queries.index_status()
        tables = runtime.queries.tables()

    if as_json:
        click.echo(json.dumps({**index_status, "tables": tables}, indent=2))
        return

    click.echo(f"Indexing version: {index_status['indexing_version']}")
    if not index_status["indexed"]:
        click.echo("Index: empty. Run 'tpl index' first.")
        return
    click.echo(f"Revision: {index_status['revision']}")
    click.echo(f"Indexed at: {index_status['date']}")
    click.echo(f"Tables: {', '.join(tables) if tables else '(none)'}")
    if index_status["failed"]:
        click.echo(f"Failed files: {', '.join(index_status['failed'])}")
