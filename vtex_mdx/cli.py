"""CLI entry point for the MasterData export tool.

Provides command-line access to full exports, single-page browsing and
entity listing.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .core.config import MDXConfig, get_config
from .core.errors import MDXError, RateLimited, RemoteCallFailed
from .extractors import STRATEGIES, StrategyOptions, fallback_for
from .orchestration import ExportService
from .output import default_export_filename, write_export
from .types.export import ProtocolVersion

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# CLI app
app = typer.Typer(
    name="vtex-mdx",
    help="VTEX MasterData export tool - Extract complete record sets from data entities",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"vtex-mdx version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        help="Show version and exit",
    ),
) -> None:
    """VTEX MasterData export tool."""
    pass


def _credentials_payload(
    config: MDXConfig,
    account: Optional[str],
    app_key: Optional[str],
    app_token: Optional[str],
    api_version: str,
) -> dict[str, Any]:
    """Build the credential part of a payload, falling back to the environment."""
    return {
        "accountName": account or config.account_name,
        "appKey": app_key or config.app_key,
        "appToken": app_token or config.app_token,
        "version": api_version,
    }


def _fail(error: MDXError) -> None:
    """Print an engine error and exit non-zero."""
    console.print(f"[red]{escape(error.message)}[/red] (status {error.status_code})")
    if isinstance(error, RemoteCallFailed) and error.body:
        console.print(f"[dim]{escape(error.body)}[/dim]")
    if isinstance(error, RateLimited):
        console.print(f"Retry in {error.retry_after_seconds}s.")
    raise typer.Exit(1)


def _setup(verbose: bool) -> MDXConfig:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = get_config()
    errors = config.validate()
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        raise typer.Exit(1)
    return config


AccountOption = typer.Option(None, "--account", "-a", help="VTEX account name")
AppKeyOption = typer.Option(None, "--app-key", help="VTEX app key")
AppTokenOption = typer.Option(None, "--app-token", help="VTEX app token")
VersionOption = typer.Option("v1", "--api-version", "-V", help="MasterData version: v1 or v2")
VerboseOption = typer.Option(False, "--verbose", help="Enable verbose logging")


@app.command()
def export(
    entity: str = typer.Argument(..., help="Data entity acronym (e.g. CL)"),
    schema: Optional[str] = typer.Option(None, "--schema", "-s", help="Schema name"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output JSON file (default: <entity>[-<schema>]-<version>.json)",
    ),
    with_metadata: bool = typer.Option(
        False,
        "--with-metadata",
        help="Wrap records with batch and truncation metadata",
    ),
    account: Optional[str] = AccountOption,
    app_key: Optional[str] = AppKeyOption,
    app_token: Optional[str] = AppTokenOption,
    api_version: str = VersionOption,
    verbose: bool = VerboseOption,
) -> None:
    """Export every record of a data entity to JSON."""
    config = _setup(verbose)
    payload = _credentials_payload(config, account, app_key, app_token, api_version)
    payload.update({"entity": entity, "schema": schema})

    service = ExportService(config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"Exporting {entity}...", total=None)

        def progress_callback(strategy: str, batches: int, records: int) -> None:
            progress.update(
                task,
                description=f"{strategy}: batch {batches}, {records} records",
            )

        try:
            result = asyncio.run(
                service.export(
                    payload,
                    options=StrategyOptions(progress_callback=progress_callback),
                )
            )
        except MDXError as e:
            progress.stop()
            _fail(e)
            return

        progress.update(task, description="Writing output...")
        output_path = output or Path(
            default_export_filename(
                entity, ProtocolVersion(api_version), result.schema_name or schema
            )
        )
        write_export(result, output_path, include_metadata=with_metadata)

    table = Table(title="Export Summary")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Entity", entity)
    table.add_row("Strategy", result.strategy_used.value)
    if result.fallback_from:
        table.add_row("Fallback from", result.fallback_from.value)
    if result.schema_name:
        table.add_row("Schema", result.schema_name)
    table.add_row("Records", str(result.record_count))
    table.add_row("Batches", str(result.batches_issued))
    table.add_row("Stop reason", result.stop_reason.value)
    truncated_style = "red" if result.truncated else "green"
    table.add_row("Truncated", f"[{truncated_style}]{result.truncated}[/{truncated_style}]")
    table.add_row("Duration", f"{result.duration_seconds:.1f}s")
    console.print(table)
    console.print(f"[bold]Output:[/bold] {output_path}")


@app.command()
def page(
    entity: str = typer.Argument(..., help="Data entity acronym (e.g. CL)"),
    page_number: int = typer.Option(1, "--page", "-p", help="Page number (1-10000)"),
    page_size: int = typer.Option(50, "--page-size", "-n", help="Page size (1-200)"),
    schema: Optional[str] = typer.Option(None, "--schema", "-s", help="Schema name"),
    account: Optional[str] = AccountOption,
    app_key: Optional[str] = AppKeyOption,
    app_token: Optional[str] = AppTokenOption,
    api_version: str = VersionOption,
    verbose: bool = VerboseOption,
) -> None:
    """Fetch and display one page of records."""
    config = _setup(verbose)
    payload = _credentials_payload(config, account, app_key, app_token, api_version)
    payload.update(
        {"entity": entity, "schema": schema, "page": page_number, "pageSize": page_size}
    )

    try:
        result = asyncio.run(ExportService(config).fetch_page(payload))
    except MDXError as e:
        _fail(e)
        return

    columns: list[str] = []
    for record in result.records:
        for key in record:
            if key not in columns:
                columns.append(key)

    table = Table(title=f"{entity} page {result.pagination.page}")
    for column in columns:
        table.add_column(escape(column), overflow="fold")
    for record in result.records:
        table.add_row(*(escape(str(record.get(column, ""))) for column in columns))
    console.print(table)

    pagination = result.pagination
    total = pagination.total if pagination.total is not None else "?"
    total_pages = pagination.total_pages if pagination.total_pages is not None else "?"
    console.print(
        f"Page {pagination.page}/{total_pages} - {len(result.records)} records "
        f"(total {total}) - previous: {pagination.has_previous}, next: {pagination.has_next}"
    )
    if result.schema_name and result.schema_name != schema:
        console.print(f"[cyan]Schema used:[/cyan] {result.schema_name}")


@app.command()
def entities(
    account: Optional[str] = AccountOption,
    app_key: Optional[str] = AppKeyOption,
    app_token: Optional[str] = AppTokenOption,
    api_version: str = VersionOption,
    verbose: bool = VerboseOption,
) -> None:
    """List data entities (one row per schema for v2)."""
    config = _setup(verbose)
    payload = _credentials_payload(config, account, app_key, app_token, api_version)

    try:
        with console.status("Listing entities..."):
            rows = asyncio.run(ExportService(config).list_entities(payload))
    except MDXError as e:
        _fail(e)
        return

    table = Table(title=f"MasterData Entities ({api_version})")
    table.add_column("Acronym", style="cyan")
    table.add_column("Name")
    table.add_column("Schema")
    for row in rows:
        table.add_row(row.acronym, row.name or "", row.schema_name or "")
    console.print(table)


@app.command()
def strategies() -> None:
    """List retrieval strategies and their fallbacks."""
    table = Table(title="Retrieval Strategies")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Fallback")

    for name, strategy_class in STRATEGIES.items():
        fallback = fallback_for(name)
        table.add_row(name.value, strategy_class.description, fallback.name.value if fallback else "")

    console.print(table)


@app.command()
def check_config() -> None:
    """Check configuration."""
    config = get_config()

    console.print("[bold]Configuration Check[/bold]\n")

    errors = config.validate()
    if errors:
        console.print("[red]Invalid configuration:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        raise typer.Exit(1)

    console.print(f"[green]Base URL:[/green] {config.base_url_template}")
    console.print(f"[green]Timeout:[/green] {config.request_timeout}s")
    console.print(f"[green]Max batches:[/green] {config.max_batches}")
    console.print(
        f"[green]Rate limits:[/green] export {config.export_rate_limit}, "
        f"page {config.page_rate_limit} per {config.rate_limit_window_ms} ms"
    )
    if config.account_name:
        console.print(f"[green]Account:[/green] {config.account_name}")
    if config.app_key:
        console.print(f"[green]App key:[/green] {config.app_key[:8]}...")
    else:
        console.print("[yellow]No default credentials set (VTEX_APP_KEY/VTEX_APP_TOKEN).[/yellow]")


# Alias commands
app.command("check")(check_config)


if __name__ == "__main__":
    app()
