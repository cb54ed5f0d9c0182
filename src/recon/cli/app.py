"""Unified CLI entry point for the address reconciliation engine.

Config precedence: settings.default.toml -> settings.local.toml -> env vars (RECON_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

from typing import Optional

import typer

from recon import __version__ as VERSION
from recon.cli.collection_cmd import collection_app
from recon.cli.extract_cmd import compare, extract, validate
from recon.cli.settings_cmd import settings_app

APP_HELP = (
    "recon — EVM address extraction and mint reconciliation. "
    "Config precedence: settings.default.toml -> settings.local.toml -> env vars (RECON_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)

app.command("extract")(extract)
app.command("validate")(validate)
app.command("compare")(compare)
app.add_typer(collection_app, name="collection")
app.add_typer(settings_app, name="settings")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: api.host)."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (default: api.port)."),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from recon.settings import get_settings

    api = get_settings().api
    uvicorn.run("recon.api.app:app", host=host or api.host, port=port or api.port, log_config=None)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context, version: bool = typer.Option(False, "--version", help="Show version and exit.")) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"recon {VERSION}")
        raise typer.Exit()

    from recon.log import configure_logging

    configure_logging()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
