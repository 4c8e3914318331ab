"""CLI entry point for atp-explorer.

Invoked as::

    atp-explorer [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m atpexplorer.cli.main
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from atpexplorer.config.loader import ConfigLoader
from atpexplorer.registry.snapshot import NotFound, PlatformUnknown, RegistrySnapshot
from atpexplorer.registry.store import RegistryStore
from atpexplorer.schema.config import ExplorerConfig
from atpexplorer.schema.errors import AtpExplorerError, InvalidQueryError
from atpexplorer.schema.identity import Identity

console = Console()
error_console = Console(stderr=True, style="bold red")

_DEFAULT_CONFIG_YAML = """\
# atp-explorer configuration
registry_path: atp-registry
identities_dir: identities
document_extensions: [".json"]
sort_documents: true
refresh_interval_seconds: 300
host: 127.0.0.1
port: 3847
cors_origins: ["*"]
log_level: INFO
"""


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _load_config(config_path: str | None, registry: str | None) -> ExplorerConfig:
    loader = ConfigLoader()
    try:
        cfg = loader.load_file(config_path) if config_path else loader.load_auto()
    except AtpExplorerError as exc:
        error_console.print(f"Could not load config: {exc}")
        raise SystemExit(1) from exc
    if registry:
        cfg = cfg.model_copy(update={"registry_path": registry})
    return cfg


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def _load_snapshot(config_path: str | None, registry: str | None) -> RegistrySnapshot:
    cfg = _load_config(config_path, registry)
    _configure_logging("WARNING")
    store = RegistryStore(cfg)
    try:
        return store.reload()
    except AtpExplorerError as exc:
        error_console.print(str(exc))
        raise SystemExit(1) from exc


def _print_json(payload: object) -> None:
    console.print_json(json.dumps(payload, default=str))


def _summary_table(title: str, rows: list[dict[str, object]]) -> Table:
    table = Table(title=title, header_style="bold cyan")
    table.add_column("name")
    table.add_column("fingerprint")
    table.add_column("platforms")
    table.add_column("anchored")
    for row in rows:
        platforms = row.get("platforms") or {}
        table.add_row(
            str(row.get("name") or "-"),
            str(row.get("gpgFingerprint") or "-"),
            ", ".join(f"{p}:{h}" for p, h in platforms.items()) or "-",  # type: ignore[union-attr]
            "yes" if row.get("proofOfExistence") else "no",
        )
    return table


def _print_lookup(result: Identity | NotFound | PlatformUnknown) -> None:
    if isinstance(result, Identity):
        _print_json(result.to_dict())
        return
    if isinstance(result, PlatformUnknown):
        known = ", ".join(result.known_platforms) or "(none)"
        error_console.print(f"Platform {result.platform!r} not indexed. Known: {known}")
    else:
        keys = ", ".join(f"{k}={v!r}" for k, v in result.query.items())
        error_console.print(f"No identity found for {keys}")
    raise SystemExit(1)


config_option = click.option(
    "--config", "-c", "config_path", default=None, help="Path to atp-explorer config file."
)
registry_option = click.option(
    "--registry", "-r", default=None, help="Registry root directory (overrides config)."
)
format_option = click.option(
    "--format",
    "output_format",
    default="table",
    type=click.Choice(["table", "json"]),
    show_default=True,
    help="Output format.",
)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="atp-explorer")
def cli() -> None:
    """Index and query Agent Trust Protocol identity registries."""


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from atpexplorer import __version__

    console.print(f"[bold]atp-explorer[/bold] v{__version__}")
    console.print(f"Python {sys.version}")


# ---------------------------------------------------------------------------
# init / config
# ---------------------------------------------------------------------------


@cli.command(name="init")
@click.option(
    "--directory",
    "-d",
    default=".",
    show_default=True,
    help="Directory in which to create the config file.",
)
def init_command(directory: str) -> None:
    """Write a default atp-explorer.yaml into DIRECTORY."""
    target_dir = Path(directory).resolve()
    config_path = target_dir / "atp-explorer.yaml"

    if config_path.exists():
        console.print(f"[yellow]Config already exists at {config_path}. Skipping.[/yellow]")
        return

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        config_path.write_text(_DEFAULT_CONFIG_YAML, encoding="utf-8")
        console.print(f"[green]Created atp-explorer config at {config_path}[/green]")
    except OSError as exc:
        error_console.print(f"Failed to create config: {exc}")
        raise SystemExit(1) from exc


@cli.command(name="config")
@click.option("--show", is_flag=True, help="Show the resolved configuration.")
@click.option("--validate", is_flag=True, help="Validate the configuration.")
@config_option
def config_command(show: bool, validate: bool, config_path: str | None) -> None:
    """Show or validate the resolved configuration."""
    cfg = _load_config(config_path, None)
    if validate:
        console.print("[green]Configuration is valid.[/green]")
    if show or not validate:
        console.print_json(cfg.model_dump_json(indent=2))


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command(name="serve")
@config_option
@registry_option
@click.option("--host", default=None, help="Bind address (overrides config).")
@click.option("--port", "-p", default=None, type=int, help="Bind port (overrides config).")
def serve_command(
    config_path: str | None,
    registry: str | None,
    host: str | None,
    port: int | None,
) -> None:
    """Serve the registry over HTTP, reloading it periodically."""
    import uvicorn

    from atpexplorer.api.app import create_app

    cfg = _load_config(config_path, registry)
    overrides: dict[str, object] = {}
    if host:
        overrides["host"] = host
    if port:
        overrides["port"] = port
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    _configure_logging(cfg.log_level)
    app = create_app(RegistryStore(cfg))
    console.print(f"[bold]ATP Explorer API[/bold] on http://{cfg.host}:{cfg.port}")
    console.print(f"Registry: {cfg.documents_dir}")
    uvicorn.run(app, host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())


# ---------------------------------------------------------------------------
# list / lookup / search / stats
# ---------------------------------------------------------------------------


@cli.command(name="list")
@config_option
@registry_option
@click.option("--limit", "-n", default=None, help="Page size (max 1000).")
@click.option("--offset", default=None, help="Index of the first identity.")
@format_option
def list_command(
    config_path: str | None,
    registry: str | None,
    limit: str | None,
    offset: str | None,
    output_format: str,
) -> None:
    """List identities in the registry."""
    page = _load_snapshot(config_path, registry).list_identities(limit=limit, offset=offset)
    if output_format == "json":
        _print_json(page.to_dict())
        return
    if not page.results:
        console.print(f"[dim](No identities on this page; {page.total} total)[/dim]")
        return
    title = f"Identities {page.offset + 1}-{page.offset + len(page.results)} of {page.total}"
    console.print(_summary_table(title, list(page.results)))


@cli.group(name="lookup")
def lookup_group() -> None:
    """Look up one identity by fingerprint, name, platform handle or wallet."""


@lookup_group.command(name="fingerprint")
@click.argument("key")
@config_option
@registry_option
def lookup_fingerprint(key: str, config_path: str | None, registry: str | None) -> None:
    """Look up by full fingerprint or its last 16 or 8 characters."""
    _print_lookup(_load_snapshot(config_path, registry).get_by_fingerprint(key))


@lookup_group.command(name="name")
@click.argument("name")
@config_option
@registry_option
def lookup_name(name: str, config_path: str | None, registry: str | None) -> None:
    """Look up by exact (case-insensitive) name."""
    _print_lookup(_load_snapshot(config_path, registry).get_by_name(name))


@lookup_group.command(name="platform")
@click.argument("platform")
@click.argument("handle")
@config_option
@registry_option
def lookup_platform(
    platform: str, handle: str, config_path: str | None, registry: str | None
) -> None:
    """Look up by HANDLE on PLATFORM."""
    _print_lookup(_load_snapshot(config_path, registry).get_by_platform(platform, handle))


@lookup_group.command(name="wallet")
@click.argument("address")
@config_option
@registry_option
def lookup_wallet(address: str, config_path: str | None, registry: str | None) -> None:
    """Look up by wallet address on any chain."""
    _print_lookup(_load_snapshot(config_path, registry).get_by_wallet(address))


@cli.command(name="search")
@click.argument("query")
@config_option
@registry_option
@click.option("--limit", "-n", default=None, help="Maximum results (max 100).")
@format_option
def search_command(
    query: str,
    config_path: str | None,
    registry: str | None,
    limit: str | None,
    output_format: str,
) -> None:
    """Search names, descriptions, handles and fingerprints for QUERY."""
    snapshot = _load_snapshot(config_path, registry)
    try:
        result = snapshot.search(query, limit=limit)
    except InvalidQueryError as exc:
        error_console.print(str(exc))
        raise SystemExit(1) from exc

    if output_format == "json":
        _print_json(result.to_dict())
        return
    if not result.results:
        console.print(f"[dim](No identities match {query!r})[/dim]")
        return
    console.print(_summary_table(f"{result.count} match(es) for {query!r}", list(result.results)))


@cli.command(name="stats")
@config_option
@registry_option
@format_option
def stats_command(config_path: str | None, registry: str | None, output_format: str) -> None:
    """Show identity, platform and chain counts."""
    stats = _load_snapshot(config_path, registry).stats()
    if output_format == "json":
        _print_json(stats.to_dict())
        return

    console.print(f"[bold]Total identities:[/bold] {stats.total_identities}")
    for title, counts in (("Platforms", stats.platform_counts), ("Chains", stats.chain_counts)):
        table = Table(title=title, header_style="bold cyan")
        table.add_column("key")
        table.add_column("identities", justify="right")
        for key, count in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
            table.add_row(key, str(count))
        console.print(table)


# ---------------------------------------------------------------------------
# health
# ---------------------------------------------------------------------------


@cli.command(name="health")
@config_option
@registry_option
@format_option
def health_command(config_path: str | None, registry: str | None, output_format: str) -> None:
    """Load the registry once and report its health."""
    from atpexplorer.health.check import HealthCheck, HealthStatus

    cfg = _load_config(config_path, registry)
    _configure_logging("WARNING")
    store = RegistryStore(cfg)
    store.refresh()

    hc = HealthCheck()
    hc.register_snapshot_check(store)
    report = hc.run_checks()

    if output_format == "json":
        _print_json(report.to_dict())
    else:
        status_colour = {
            HealthStatus.HEALTHY: "green",
            HealthStatus.DEGRADED: "yellow",
            HealthStatus.UNHEALTHY: "red",
        }
        colour = status_colour.get(report.status, "white")
        console.print(f"Overall status: [{colour}]{report.status.value.upper()}[/{colour}]")

        table = Table(header_style="bold cyan")
        table.add_column("Check")
        table.add_column("Status")
        table.add_column("Message")
        for name, result in report.checks.items():
            c = status_colour.get(result.status, "white")
            table.add_row(name, f"[{c}]{result.status.value}[/{c}]", result.message)
        console.print(table)

    if report.status is HealthStatus.UNHEALTHY:
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
