"""
Load Command - Walk the grid and load hourly forecasts into the geo store.

Usage:
    gridload load
    gridload load --dry-run --duration-minutes 1 --pace 0
    gridload -c gridload.yaml load --identity random
"""

import logging
import sys
import time
from typing import Optional

import click

from cli.commands.options import (
    EXIT_CONFIG_ERROR,
    collect_overrides,
    grid_options,
    report_config_error,
)
from core.config import LoaderConfig
from core.exceptions import ConfigError
from core.forecast.client import OpenWeatherClient
from core.grid.walker import GridWalker
from core.ingestion.orchestrator import IngestionOrchestrator, IngestionSummary
from core.store.geo import MemoryGeoStore, create_geo_store
from core.store.writer import GeoRecordWriter

logger = logging.getLogger("gridload.load")


def build_orchestrator(config: LoaderConfig, wait: bool = True):
    """
    Assemble the provider client, store, writer and orchestrator for a config.

    Returns:
        Tuple of (orchestrator, client, store)
    """
    store = create_geo_store(config.store_url)
    client = OpenWeatherClient(
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=config.request_timeout_seconds,
    )
    writer = GeoRecordWriter(store, identity=config.identity)
    orchestrator = IngestionOrchestrator(
        client=client,
        writer=writer,
        max_workers=config.max_workers,
        wait_for_tasks=wait,
    )
    return orchestrator, client, store


def print_summary(summary: IngestionSummary, elapsed: float) -> None:
    """Print a run summary."""
    click.echo(f"\n{'=' * 50}")
    click.echo("  Load Summary")
    click.echo(f"{'=' * 50}")
    for key, value in summary.to_dict().items():
        click.echo(f"  {key.replace('_', ' ').capitalize()}: {value}")
    click.echo(f"  Elapsed: {elapsed:.1f}s")


@click.command("load")
@grid_options
@click.option(
    "--store-url",
    type=str,
    default=None,
    help="Geo store address (redis://host:port/db, host:port, or memory://).",
)
@click.option(
    "--max-workers",
    type=int,
    default=None,
    help="Maximum concurrent store writes (default: 10).",
)
@click.option(
    "--identity",
    "identity_mode",
    type=click.Choice(["coordinate", "random"], case_sensitive=False),
    default=None,
    help="Member identity scheme for stored records (default: coordinate).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Write to an in-memory store instead of the configured one.",
)
@click.option(
    "--no-wait",
    is_flag=True,
    default=False,
    help="Return when the traversal ends without draining in-flight writes.",
)
@click.pass_obj
def load(
    ctx,
    step_distance_km: Optional[float],
    duration_minutes: Optional[int],
    start_lat: Optional[float],
    start_lon: Optional[float],
    store_url: Optional[str],
    pace_seconds: Optional[float],
    max_workers: Optional[int],
    identity_mode: Optional[str],
    dry_run: bool,
    no_wait: bool,
):
    """
    Walk the grid and load hourly forecasts into the geo store.

    Configuration is checked before any network activity; an invalid
    configuration exits with status 2. Per-coordinate and per-record
    failures are logged and skipped.

    \b
    Examples:
        # Load with settings from .env
        gridload load

        # Small dry run without pacing
        gridload load --dry-run --duration-minutes 1 --pace 0
    """
    overrides = collect_overrides(
        {
            "step_distance_km": step_distance_km,
            "duration_minutes": duration_minutes,
            "start_lat": start_lat,
            "start_lon": start_lon,
            "pace_seconds": pace_seconds,
        }
    )
    if dry_run:
        overrides["store_url"] = "memory://"
    elif store_url is not None:
        overrides["store_url"] = store_url
    if max_workers is not None:
        overrides["max_workers"] = max_workers
    if identity_mode is not None:
        overrides["identity_mode"] = identity_mode.lower()

    try:
        config = ctx.load_config(overrides).validate()
    except ConfigError as e:
        report_config_error(e)
        sys.exit(EXIT_CONFIG_ERROR)

    walker = GridWalker(config.grid_parameters(), pace_seconds=config.pace_seconds)
    orchestrator, client, store = build_orchestrator(config, wait=not no_wait)

    click.echo(
        f"Loading {walker.cell_count} coordinates from "
        f"{config.start_lat},{config.start_lon} every {config.step_distance_km} km"
        f"{' (dry run)' if dry_run else ''}"
    )

    start_time = time.time()
    try:
        summary = orchestrator.run(walker)
    finally:
        client.close()
        if not no_wait:
            store.close()

    print_summary(summary, time.time() - start_time)
    if isinstance(store, MemoryGeoStore):
        click.echo(f"  Members in memory store: {len(store)}")
