"""Command-line interface for the refcheck project."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import httpx
import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from refcheck import exporters
from refcheck.errors import RefcheckError
from refcheck.log import configure_logging
from refcheck.models import VerificationRecord, VerificationStatus
from refcheck.services import PROVIDERS, ReferenceVerifier, build_providers
from refcheck.settings import get_settings
from refcheck.utils import split_citations

console = Console()
app = typer.Typer(help="refcheck – verify citations against OpenAlex and Crossref")
logger = structlog.get_logger(__name__)

STATUS_STYLES = {
    VerificationStatus.VERIFIED: ("green", "verified"),
    VerificationStatus.SUSPICIOUS: ("yellow", "suspicious"),
    VerificationStatus.NOT_FOUND: ("red", "not found"),
}
STATE_STYLES = {
    "matched": "green",
    "mismatch": "yellow",
    "not_found": "red",
    "error": "dim",
}


@app.callback()
def main() -> None:
    """Load settings and configure logging before any command runs."""
    try:
        settings = get_settings()
    except RefcheckError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=2) from exc
    configure_logging(settings.log_level)


def _read_input(source: Optional[Path]) -> str:
    if source is None or str(source) == "-":
        return sys.stdin.read()
    if not source.exists():
        raise typer.BadParameter(f"{source} does not exist.")
    if not source.is_file():
        raise typer.BadParameter(f"{source} must point to a file.")
    return source.read_text(encoding="utf-8")


async def _run_check(
    lines: list[str],
    provider_names: list[str],
    delay: float,
    show_progress: bool,
) -> list[VerificationRecord]:
    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        providers = build_providers(provider_names, client, settings)
        verifier = ReferenceVerifier(providers, delay=delay)
        if not show_progress:
            return await verifier.verify(lines)
        with Progress(
            TextColumn("[bold]Checking"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("check", total=100)
            return await verifier.verify(
                lines, on_progress=lambda percent: progress.update(task, completed=percent)
            )


@app.command()
def check(
    source: Optional[Path] = typer.Argument(None, help="File with one citation per line ('-' for stdin)"),
    provider: Optional[list[str]] = typer.Option(
        None, "--provider", "-p", help="Provider to query (openalex, crossref); repeatable"
    ),
    delay: Optional[float] = typer.Option(None, min=0, help="Seconds to wait between citations"),
    json_output: bool = typer.Option(False, "--json", help="Print records as JSON"),
    csv_output: Optional[Path] = typer.Option(None, "--csv", help="Write records to a CSV file"),
    verified_output: Optional[Path] = typer.Option(
        None, "--verified-output", help="Write the verified citation lines to a file"
    ),
    links: bool = typer.Option(False, "--links", help="Show manual search links for unverified lines"),
    strict: bool = typer.Option(False, help="Exit with code 1 unless every citation is verified"),
) -> None:
    """Verify every citation line against the configured providers."""
    settings = get_settings()
    lines = split_citations(_read_input(source))
    if not lines:
        if json_output:
            typer.echo("[]")
        else:
            console.print("[yellow]No citations found in the input.")
        return

    provider_names = list(provider or settings.providers)
    run_delay = settings.delay if delay is None else delay
    logger.info("check.start", lines=len(lines), providers=provider_names, delay=run_delay)
    try:
        records = asyncio.run(
            _run_check(lines, provider_names, run_delay, show_progress=not json_output)
        )
    except RefcheckError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc

    if json_output:
        typer.echo(exporters.records_to_json(records))
    else:
        _render_records(records, show_links=links)
        _print_summary(records)

    if csv_output:
        csv_output.write_text(exporters.records_to_csv(records), encoding="utf-8")
        _report(f"Wrote {len(records)} records to {csv_output}", quiet=json_output)
    if verified_output:
        content = exporters.verified_lines(records)
        verified_output.write_text(content + "\n" if content else "", encoding="utf-8")
        count = sum(1 for record in records if record.verified)
        _report(f"Wrote {count} verified citations to {verified_output}", quiet=json_output)

    if strict and not all(record.verified for record in records):
        raise typer.Exit(code=1)


def _report(message: str, *, quiet: bool) -> None:
    # stdout carries only the JSON document in --json mode
    if quiet:
        logger.info("check.output", message=message)
    else:
        console.print(f"[green]{escape(message)}")


def _render_records(records: list[VerificationRecord], *, show_links: bool) -> None:
    table = Table(title="Verification Report")
    table.add_column("#", justify="right")
    table.add_column("Status")
    table.add_column("Citation", overflow="fold")
    providers: list[str] = []
    for record in records:
        providers.extend(name for name in record.results if name not in providers)
    for name in providers:
        table.add_column(name, overflow="fold")

    for index, record in enumerate(records, start=1):
        color, label = STATUS_STYLES[record.status]
        citation = escape(record.original)
        if show_links and not record.verified:
            urls = exporters.manual_search_links(record.query)
            citation += "\n" + "\n".join(f"[link={url}]{name}[/link]" for name, url in urls.items())
        cells = [str(index), f"[{color}]{label}[/{color}]", citation]
        for name in providers:
            result = record.results.get(name)
            if result is None:
                cells.append("—")
                continue
            state = exporters.provider_state(result)
            style = STATE_STYLES[state]
            detail = f"[{style}]{state}[/{style}]"
            if result.title:
                detail += f"\n{escape(result.title)}"
                if result.year:
                    detail += f" ({result.year})"
            cells.append(detail)
        table.add_row(*cells)
    console.print(table)


def _print_summary(records: list[VerificationRecord]) -> None:
    counts = {status: 0 for status in VerificationStatus}
    for record in records:
        counts[record.status] += 1
    parts = []
    for status, count in counts.items():
        color, label = STATUS_STYLES[status]
        parts.append(f"[{color}]{count} {label}[/{color}]")
    console.print(" • ".join(parts))
    if counts[VerificationStatus.SUSPICIOUS]:
        console.print(
            "[yellow]Suspicious citations matched a record whose title differs; review them manually."
        )


@app.command()
def config(
    json_output: bool = typer.Option(False, "--json", help="Output settings as JSON"),
) -> None:
    """Display the resolved settings."""
    settings = get_settings()
    if json_output:
        typer.echo(settings.model_dump_json(indent=2))
        return
    table = Table(title="refcheck Settings")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def doctor() -> None:
    """Environment checks (Python, deps, provider configuration)."""
    checks: list[tuple[str, bool, str]] = []
    checks.append(("python>=3.10", sys.version_info >= (3, 10), sys.version.split()[0]))
    for mod in ("httpx", "pydantic", "structlog"):
        try:
            module = __import__(mod)
            ver = getattr(module, "__version__", "unknown")
            checks.append((f"{mod} import", True, ver))
        except Exception as exc:  # pragma: no cover
            checks.append((f"{mod} import", False, str(exc)))
    settings = get_settings()
    unknown = [name for name in settings.providers if name not in PROVIDERS]
    if unknown:
        checks.append(("providers", False, f"unknown: {', '.join(unknown)}"))
    else:
        checks.append(("providers", True, ", ".join(settings.providers)))

    passed = True
    for name, ok, note in checks:
        status = "[green]OK[/green]" if ok else "[red]FAIL[/red]"
        console.print(f"{status} {name} ({note})")
        passed = passed and ok
    if not passed:
        raise typer.Exit(code=1)
    console.print("[green]Doctor checks passed.[/green]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Launch the verification web API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        console.print("[red]FastAPI dependencies not installed.[/red]")
        raise typer.Exit(code=1) from exc

    uvicorn.run(
        "refcheck.web.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


if __name__ == "__main__":  # pragma: no cover
    app()
