"""CLI commands for managing address collections."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

collection_app = typer.Typer(help="Manage named address collections — list, create, add, and export.")
console = Console()


def _service():
    from recon.collection import CollectionService
    from recon.store import build_collection_store

    return CollectionService(build_collection_store())


# ---------------------------------------------------------------------------
# recon collection list
# ---------------------------------------------------------------------------


@collection_app.command("list")
def list_collections(
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON."),
) -> None:
    """List collections with their member counts."""
    collections = _service().list_all()

    if json_output:
        console.print_json(json.dumps([c.to_response() for c in collections], indent=2))
        return

    if not collections:
        console.print("No collections yet")
        return

    table = Table(title=f"Collections ({len(collections)})")
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="cyan")
    table.add_column("Addresses", justify="right")
    table.add_column("Description", style="dim", max_width=50, overflow="ellipsis")
    for c in collections:
        table.add_row(str(c.id), c.name, str(c.address_count), c.description or "—")
    console.print(table)


# ---------------------------------------------------------------------------
# recon collection create <name>
# ---------------------------------------------------------------------------


@collection_app.command("create")
def create_collection(
    name: str = typer.Argument(..., help="Unique collection name."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Optional description."),
) -> None:
    """Create an empty collection."""
    from recon.exceptions import ReconError

    try:
        collection = _service().create(name, description)
    except ReconError as e:
        console.print(f"[red]✗[/red] {e.error}: {e.message}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Created collection {collection.id} ({collection.name})")


# ---------------------------------------------------------------------------
# recon collection add <id> [addresses...] [--file path]
# ---------------------------------------------------------------------------


@collection_app.command("add")
def add_addresses(
    collection_id: int = typer.Argument(..., help="Collection id."),
    addresses: Optional[list[str]] = typer.Argument(None, help="Addresses to add."),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Address file to upload instead."),
) -> None:
    """Add addresses (or a parsed address file) to a collection."""
    from recon.address.models import RawDocument
    from recon.exceptions import ReconError

    if not addresses and file is None:
        console.print("[red]✗[/red] Provide addresses or --file")
        raise typer.Exit(code=1)

    service = _service()
    try:
        if file is not None:
            if not file.is_file():
                console.print(f"[red]File not found:[/red] {file}")
                raise typer.Exit(code=1)
            report = service.upload_file(collection_id, RawDocument(name=file.name, data=file.read_bytes()))
            console.print(f"  Found in {report.filename}: {report.found}")
        else:
            report = service.add_addresses(collection_id, addresses or [])
    except ReconError as e:
        console.print(f"[red]✗[/red] {e.error}: {e.message}")
        raise typer.Exit(code=1)

    console.print(f"  Added:   [green]{report.added}[/green]")
    console.print(f"  Skipped: {report.skipped}")
    console.print(f"  Invalid: [yellow]{report.invalid}[/yellow]")
    console.print(f"  Total:   [bold]{report.total_in_collection}[/bold]")
    for bad in getattr(report, "invalid_addresses", []):
        console.print(f"    [dim]{bad.address}[/dim] ({bad.error})")


# ---------------------------------------------------------------------------
# recon collection export <id>
# ---------------------------------------------------------------------------


@collection_app.command("export")
def export_collection(
    collection_id: int = typer.Argument(..., help="Collection id."),
    output_dir: Path = typer.Option(Path("."), "--output", "-o", help="Output directory."),
    format: str = typer.Option("csv", "--format", help="Export format: csv or xlsx."),
) -> None:
    """Write a collection's members to a CSV or XLSX file."""
    from recon.collection.export import safe_filename, write_xlsx
    from recon.exceptions import ReconError

    service = _service()
    try:
        filename, body = service.export(collection_id)
    except ReconError as e:
        console.print(f"[red]✗[/red] {e.error}: {e.message}")
        raise typer.Exit(code=1)

    filename = safe_filename(filename)
    output_dir.mkdir(parents=True, exist_ok=True)
    if format == "csv":
        out_path = output_dir / filename
        out_path.write_text(body, encoding="utf-8")
    elif format == "xlsx":
        out_path = write_xlsx(body.split("\n") if body else [], output_dir / f"{Path(filename).stem}.xlsx")
    else:
        console.print(f"[yellow]Unknown format: {format}[/yellow]")
        raise typer.Exit(code=1)

    count = body.count("\n") + 1 if body else 0
    console.print(f"[green]✓[/green] {format.upper()}: {count} address(es) → {out_path}")
