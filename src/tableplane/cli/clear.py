"""tpl clear command - remove indexed data from the store."""

import click
import questionary

from tableplane.cli.utils import open_runtime
from tableplane.core.progress import pluralize, status


def _describe(table: str | None, file: str | None) -> str:
    if table is None:
        return "every indexed table and the index tracker"
    if file is None:
        return f"every indexed file of table '{table}'"
    return f"indexed file '{table}/{file}'"


@click.command()
@click.option("--table", "-t", default=None, help="Only clear this table")
@click.option("--file", "-f", "file", default=None, help="Only clear this file (requires --table)")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def clear_command(ctx: click.Context, table: str | None, file: str | None, yes: bool) -> None:
    """Delete indexed records; the markdown files themselves are untouched.

    Clearing everything also drops the tracker, so the next 'tpl index'
    rebuilds from scratch. Clearing one table or file keeps the tracker,
    so run 'tpl index --full' to restore it.
    """
    if file is not None and table is None:
        raise click.UsageError("--file requires --table")

    target = _describe(table, file)
    if not yes:
        answer = questionary.confirm(f"Delete {target}?", default=False).ask()
        if not answer:
            status("Cancelled", style="none")
            return

    with open_runtime(ctx) as runtime:
        removed = runtime.store.clear(table=table, file=file)

    status(f"Cleared {target} ({pluralize(removed, 'file')})", style="success")
