"""tpl index command - bring the store up to date with HEAD."""

import json

import click

from tableplane.cli.utils import open_runtime
from tableplane.core.progress import pluralize, status
from tableplane.index.ops import IndexStats


def _print_summary(stats: IndexStats) -> None:
    revision = stats.revision[:12]
    if stats.no_op:
        status(f"Up to date at {revision}", style="success")
        return

    parts = [f"{pluralize(stats.files_indexed, 'file')} indexed"]
    if stats.files_skipped:
        parts.append(f"{stats.files_skipped} unchanged")
    if stats.files_pruned:
        parts.append(f"{stats.files_pruned} pruned")
    summary = ", ".join(parts) + f" at {revision} ({stats.duration_seconds:.1f}s)"
    status(summary, style="success")

    for failure in stats.failures:
        status(f"{failure.key}: {failure.error}", style="error", indent=2)


@click.command()
@click.option("--full", is_flag=True, help="Rebuild every table from scratch")
@click.option("--json", "as_json", is_flag=True, help="Output run stats as JSON")
@click.pass_context
def index_command(ctx: click.Context, full: bool, as_json: bool) -> None:
    """Index markdown files changed since the last indexed revision.

    Files that fail are reported and retried on the next run; the command
    exits non-zero when any file failed.
    """
    with open_runtime(ctx) as runtime:
        stats = runtime.engine.run(full=full)

    if as_json:
        click.echo(json.dumps(stats.to_dict(), indent=2))
    else:
        _print_summary(stats)

    if stats.failures:
        raise click.ClickException(f"{pluralize(stats.files_failed, 'file')} failed to index")
