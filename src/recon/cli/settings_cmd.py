"""CLI commands for inspecting and validating recon settings."""

from __future__ import annotations

import json

import typer
from rich.console import Console

settings_app = typer.Typer(help="Inspect and validate recon configuration.")
console = Console()


@settings_app.command("show")
def show_settings() -> None:
    """Display the currently resolved settings."""
    from recon.settings import get_settings

    settings = get_settings()
    console.print_json(json.dumps(settings.model_dump(mode="json"), indent=2, default=str))


@settings_app.command("validate")
def validate_settings() -> None:
    """Validate settings and report any issues."""
    from recon.settings import get_settings

    try:
        settings = get_settings()
    except Exception as e:
        console.print(f"[red]✗[/red] Settings validation failed: {e}")
        raise typer.Exit(code=1)

    console.print("[green]✓[/green] Settings are valid.")
    console.print(f"  Environment: {settings.env}")
    console.print(f"  Database:    {settings.storage.db_url or settings.storage.sqlite_path}")
    console.print(f"  Max files:   {settings.extraction.max_files}")
    if not settings.thread.bearer_token:
        console.print("  [yellow]![/yellow] thread.bearer_token is not set; thread extraction is disabled")
    if settings.api.require_auth and not settings.api.api_keys:
        console.print("  [yellow]![/yellow] api.require_auth is on but api.api_keys is empty")
