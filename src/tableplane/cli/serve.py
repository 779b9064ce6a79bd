"""tpl serve command - run the HTTP service in the foreground."""

import click

from tableplane.cli.utils import open_runtime
from tableplane.core.progress import status


@click.command()
@click.option("--host", default=None, help="Override server host")
@click.option("--port", "-p", type=int, default=None, help="Override server port")
@click.pass_context
def serve_command(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Serve tables and views over HTTP until interrupted."""
    from tableplane.daemon.lifecycle import serve

    with open_runtime(ctx) as runtime:
        server_config = runtime.config.server
        base_url = f"http://{host or server_config.host}:{port or server_config.port}"
        status(f"Serving {runtime.layout.root} at {base_url}", style="success")
        try:
            serve(runtime, host=host, port=port)
        except KeyboardInterrupt:
            click.echo("\nStopped")
