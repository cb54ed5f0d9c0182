"""Top-level CLI commands: extract, validate, and compare.

These run the same engine code as the API routes against local files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

console = Console()


def _read_document(path: Path):
    from recon.address.models import RawDocument

    if not path.is_file():
        console.print(f"[red]File not found:[/red] {path}")
        raise typer.Exit(code=1)
    return RawDocument(name=path.name, data=path.read_bytes())


# ---------------------------------------------------------------------------
# recon extract <file>...
# ---------------------------------------------------------------------------


def extract(
    files: list[Path] = typer.Argument(..., help="Files to scan (csv, txt, json, xlsx, xls, pdf)."),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output results as JSON."),
) -> None:
    """Extract unique EVM addresses from one or more files."""
    from recon.exceptions import ValidationFailedError
    from recon.ingest import BatchFileProcessor

    documents = [_read_document(p) for p in files]
    try:
        summary = BatchFileProcessor().process(documents)
    except ValidationFailedError as e:
        console.print(f"[red]✗[/red] {e.message}")
        raise typer.Exit(code=1)

    if json_output:
        console.print_json(json.dumps(summary.to_result().to_response(), indent=2))
        return

    for outcome in summary.outcomes:
        if not outcome.ok:
            console.print(f"[yellow]Skipped {outcome.filename}:[/yellow] {outcome.error}")

    if not summary.addresses:
        console.print(f"No addresses found in {summary.display_name()}")
        return

    table = Table(title=f"Addresses Found in {summary.display_name()}")
    table.add_column("#", style="dim", width=5)
    table.add_column("Address", style="green")
    for i, address in enumerate(summary.addresses, 1):
        table.add_row(str(i), address)

    console.print(table)
    console.print(
        f"\n[bold]{len(summary.addresses)}[/bold] address(es) from "
        f"{summary.files_processed} file(s), {summary.files_with_addresses} with addresses"
    )


# ---------------------------------------------------------------------------
# recon validate <address>
# ---------------------------------------------------------------------------


def validate(
    address: str = typer.Argument(..., help="EVM address to validate."),
) -> None:
    """Check an address against the EVM address grammar."""
    from recon.address.patterns import validate_address_with_details

    check = validate_address_with_details(address)
    if check.is_valid:
        console.print("[green]✓[/green] Valid EVM address")
        console.print(f"  Normalized: {check.normalized}")
    else:
        console.print(f"[red]✗[/red] {check.error}")
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# recon compare <minted> <eligible>
# ---------------------------------------------------------------------------


def compare(
    minted: Path = typer.Argument(..., help="File of addresses that already received a mint."),
    eligible: Path = typer.Argument(..., help="File of eligible addresses."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write remaining addresses to this file."),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output the full result as JSON."),
) -> None:
    """Reconcile an eligible list against a minted list and record the comparison."""
    from recon.exceptions import ReconError
    from recon.reconcile import ComparisonService
    from recon.store import build_collection_store

    service = ComparisonService(build_collection_store())
    try:
        result = service.compare_files(_read_document(minted), _read_document(eligible))
    except ReconError as e:
        console.print(f"[red]✗[/red] {e.error}: {e.message}")
        raise typer.Exit(code=1)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text("\n".join(r.address for r in result.not_minted), encoding="utf-8")

    if json_output:
        console.print_json(json.dumps(result.to_response(), indent=2))
        return

    stats = result.stats
    console.print(f"  Eligible:  {stats.total_eligible}")
    console.print(f"  Minted:    {stats.total_minted}")
    console.print(f"  Remaining: [bold]{stats.remaining}[/bold]")
    if stats.invalid_addresses:
        console.print(f"  Invalid:   [yellow]{stats.invalid_addresses}[/yellow]")
        for issue in (result.validation_errors or [])[:10]:
            line = f" line {issue.line}" if issue.line else ""
            console.print(f"    [dim]{issue.file}{line}:[/dim] {issue.address} ({issue.error})")
    if output is not None:
        console.print(f"[green]✓[/green] Remaining addresses written to {output}")
