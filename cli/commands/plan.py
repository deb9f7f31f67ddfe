"""
Plan Command - Show the grid a load run would cover.

Walks the grid without pacing or network access and reports its geometry.

Usage:
    gridload plan --step-km 10 --duration-minutes 60 --start-lat 45 --start-lon -120
    gridload plan --format json
    gridload plan --cells
"""

import json
import logging
import sys
from typing import Any, Dict, List, Optional

import click

from cli.commands.options import (
    EXIT_CONFIG_ERROR,
    collect_overrides,
    grid_options,
    report_config_error,
)
from core.exceptions import ConfigError
from core.grid.walker import GridCell, GridWalker

logger = logging.getLogger("gridload.plan")


def summarize_grid(walker: GridWalker, pace_seconds: float) -> Dict[str, Any]:
    """
    Walk the grid once and describe it.

    Args:
        walker: Fresh walker; it is consumed
        pace_seconds: Pacing the real run would use

    Returns:
        Dictionary with side, cell counts, bounds and estimated pacing time
    """
    cells: List[GridCell] = list(walker.iter_cells())
    lats = [c.coordinate.lat for c in cells]
    first, last = cells[0], cells[-1]

    return {
        "grid_side": walker.max_column,
        "columns": max(c.column for c in cells),
        "rows": max(c.row for c in cells),
        "cells": len(cells),
        "step_distance_km": walker.params.step_distance_km,
        "start": first.coordinate.to_dict(),
        "last": last.coordinate.to_dict(),
        "lat_range": [min(lats), max(lats)],
        "estimated_pacing_seconds": max(len(cells) - 1, 0) * pace_seconds,
        "cell_list": [
            {"column": c.column, "row": c.row, **c.coordinate.to_dict()} for c in cells
        ],
    }


@click.command("plan")
@grid_options
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--cells",
    "show_cells",
    is_flag=True,
    default=False,
    help="List every cell in traversal order.",
)
@click.pass_obj
def plan(
    ctx,
    step_distance_km: Optional[float],
    duration_minutes: Optional[int],
    start_lat: Optional[float],
    start_lon: Optional[float],
    pace_seconds: Optional[float],
    output_format: str,
    show_cells: bool,
):
    """
    Show the grid a load run would cover, without network access.

    Only the grid settings are required; provider and store settings are
    not checked.

    \b
    Examples:
        gridload plan --step-km 10 --duration-minutes 60 --start-lat 45 --start-lon -120
        gridload plan --format json --cells
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

    try:
        config = ctx.load_config(overrides)
        problems = config.grid_problems()
        if problems:
            raise ConfigError("Invalid grid configuration", problems)
    except ConfigError as e:
        report_config_error(e)
        sys.exit(EXIT_CONFIG_ERROR)

    walker = GridWalker(config.grid_parameters(), pace_seconds=0)
    summary = summarize_grid(walker, config.pace_seconds)
    if not show_cells:
        summary.pop("cell_list")

    if output_format.lower() == "json":
        click.echo(json.dumps(summary, indent=2))
        return

    click.echo(f"\n{'=' * 50}")
    click.echo("  Grid Plan")
    click.echo(f"{'=' * 50}")
    click.echo(f"  Grid side: {summary['grid_side']:.3f}")
    click.echo(f"  Cells: {summary['cells']} ({summary['columns']} columns x {summary['rows']} rows)")
    click.echo(f"  Step: {summary['step_distance_km']} km")
    click.echo(f"  Start: {summary['start']['lat']:.5f}, {summary['start']['lon']:.5f}")
    click.echo(f"  Last cell: {summary['last']['lat']:.5f}, {summary['last']['lon']:.5f}")
    click.echo(
        f"  Latitude range: {summary['lat_range'][0]:.5f} to {summary['lat_range'][1]:.5f}"
    )
    click.echo(f"  Pacing time: {summary['estimated_pacing_seconds']:.0f}s")

    if show_cells:
        click.echo("\n  column  row  lat  lon")
        for cell in summary["cell_list"]:
            click.echo(
                f"  {cell['column']:>6}  {cell['row']:>3}  {cell['lat']:.5f}  {cell['lon']:.5f}"
            )
