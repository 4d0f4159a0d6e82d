"""
Collins exporter entry point.

Usage:
    collins-exporter                                   Serve metrics on :9136
    collins-exporter --collins-config ~/collins.yml    Use a specific Collins config
    collins-exporter --mock                            Serve metrics for a fake fleet
    collins-exporter probe --mock                      One-shot scrape, print a summary
"""

from __future__ import annotations

import logging
from collections import Counter

import click

from collins_exporter import __version__
from collins_exporter.collector.base import InventoryBackend
from collins_exporter.collector.collins_client import CollinsClient
from collins_exporter.collector.fetcher import DEFAULT_PAGE_SIZE, DEFAULT_QUERY, InventoryFetcher
from collins_exporter.collector.mock_client import MockCollinsClient
from collins_exporter.config import ConfigError, load_config
from collins_exporter.engine.coordinator import ScrapeCoordinator
from collins_exporter.metrics import ASSET_STATUS, AssetStatus, ScrapeResult
from collins_exporter.server import DEFAULT_LISTEN_ADDRESS, DEFAULT_TELEMETRY_PATH

log = logging.getLogger("collins_exporter")


def _build_backend(mock: bool, collins_config: str) -> InventoryBackend:
    if mock:
        return MockCollinsClient()
    try:
        return CollinsClient(load_config(collins_config))
    except ConfigError as e:
        raise click.ClickException(f"Could not set up Collins client: {e}")


def _build_coordinator(ctx) -> ScrapeCoordinator:
    backend = _build_backend(ctx.obj["mock"], ctx.obj["collins_config"])
    log.info("Using backend %s", backend.name())
    fetcher = InventoryFetcher(backend, query=ctx.obj["query"], page_size=ctx.obj["page_size"])
    return ScrapeCoordinator(fetcher)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="collins-exporter")
@click.option("--listen-address", default=DEFAULT_LISTEN_ADDRESS,
              help="Address to listen on for web interface and telemetry.")
@click.option("--telemetry-path", default=DEFAULT_TELEMETRY_PATH,
              help="Path under which to expose metrics.")
@click.option("--collins-config", default=None,
              help="Path to Collins config. Defaults to ~/.collins.yml, /etc/collins.yml, /var/db/collins.yml.")
@click.option("--query", default=DEFAULT_QUERY, help="Collins asset query (CQL).")
@click.option("--page-size", default=DEFAULT_PAGE_SIZE, type=click.IntRange(min=1),
              help="Assets requested per Collins page.")
@click.option("--mock", is_flag=True, default=False, help="Use a simulated Collins inventory")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, listen_address: str, telemetry_path: str, collins_config: str,
        query: str, page_size: int, mock: bool, verbose: bool):
    """Collins exporter - Prometheus metrics for the Collins asset inventory."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["mock"] = mock
    ctx.obj["collins_config"] = collins_config
    ctx.obj["query"] = query
    ctx.obj["page_size"] = page_size

    if ctx.invoked_subcommand is not None:
        return

    from prometheus_client.registry import CollectorRegistry
    from collins_exporter.exporter import CollinsCollector
    from collins_exporter.server import serve

    log.info("Starting collins_exporter %s", __version__)
    coordinator = _build_coordinator(ctx)
    registry = CollectorRegistry()
    registry.register(CollinsCollector(coordinator))

    try:
        serve(registry, listen_address, telemetry_path)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--listen-address")
    finally:
        coordinator.close()


def _status_counts(result: ScrapeResult) -> Counter:
    counts: Counter = Counter()
    for obs in result.observations:
        if obs.desc is ASSET_STATUS and obs.value == 1:
            counts[obs.labels["status"]] += 1
    return counts


@cli.command()
@click.pass_context
def probe(ctx):
    """Run a single scrape of Collins and print a summary."""
    from rich.console import Console
    from rich.table import Table

    with _build_coordinator(ctx) as coordinator:
        result = coordinator.request()

    console = Console()

    if not result.success:
        console.print(f"\n[bold red]Scrape failed[/bold red] after {result.duration_seconds:.2f}s "
                      "(see log for the Collins error)\n")
        raise SystemExit(1)

    counts = _status_counts(result)
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Status")
    table.add_column("Assets", justify="right")
    for status in AssetStatus:
        n = counts.get(status.value, 0)
        table.add_row(status.value, f"[dim]{n}[/dim]" if n == 0 else f"{n:,}")

    console.print(table)

    unknown = result.asset_count - sum(counts.values())
    if unknown:
        console.print(f"[yellow]{unknown} assets with an unrecognized status[/yellow]")

    console.print(
        f"\n[bold green]up[/bold green]  {result.asset_count:,} assets, "
        f"{len(result.observations):,} series in {result.duration_seconds:.2f}s\n"
    )


if __name__ == "__main__":
    cli()
