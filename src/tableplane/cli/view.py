"""tpl view command - print a table's view."""

import json
from pathlib import Path

import click
from rich.console import Console

from tableplane.cli.utils import open_runtime
from tableplane.core.progress import matrix_table, status


@click.command()
@click.argument("table")
@click.option(
    "--condensed",
    "mode",
    flag_value="condensed",
    help="Header plus one row per file, formulas unevaluated",
)
@click.option(
    "--evaluated", "mode", flag_value="evaluated", help="Condensed view with formulas computed"
)
@click.option("--html", "mode", flag_value="html", help="Evaluated view as an HTML table")
@click.option("--json", "as_json", is_flag=True, help="Output JSON instead of a table")
@click.option(
    "--xlsx",
    "xlsx_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the view as an xlsx workbook to this path",
)
@click.pass_context
def view_command(
    ctx: click.Context,
    table: str,
    mode: str | None,
    as_json: bool,
    xlsx_path: Path | None,
) -> None:
    """Show the view of TABLE.

    Without a mode flag the rendered view is printed as JSON, one entry per
    file mapping column names to values.
    """
    with open_runtime(ctx) as runtime:
        queries = runtime.queries
        if xlsx_path is not None:
            xlsx_path.write_bytes(queries.xlsx_view(table))
            status(f"Wrote {xlsx_path}", style="success")
            return

        if mode == "html":
            click.echo(queries.html_view(table))
            return

        if mode in ("condensed", "evaluated"):
            matrix = (
                queries.condensed_view(table)
                if mode == "condensed"
                else queries.evaluated_view(table)
            )
            if as_json:
                click.echo(json.dumps(matrix, indent=2))
            else:
                Console().print(matrix_table(matrix, title=table))
            return

        click.echo(json.dumps(queries.rendered_view(table), indent=2))
