"""
Shared command options.

Grid and provider settings that can override the configuration file and
environment on any command.
"""

from typing import Any, Dict

import click

from core.exceptions import ConfigError

# Exit code for configuration failures
EXIT_CONFIG_ERROR = 2

OVERRIDE_KEYS = (
    "step_distance_km",
    "duration_minutes",
    "start_lat",
    "start_lon",
    "pace_seconds",
)


def grid_options(func):
    """Attach the grid override options to a command."""
    options = [
        click.option(
            "--step-km",
            "step_distance_km",
            type=float,
            default=None,
            help="Distance between grid cells in kilometers.",
        ),
        click.option(
            "--duration-minutes",
            type=int,
            default=None,
            help="Traversal time budget in minutes (sets the grid size).",
        ),
        click.option(
            "--start-lat",
            type=float,
            default=None,
            help="Latitude of the top-left grid cell.",
        ),
        click.option(
            "--start-lon",
            type=float,
            default=None,
            help="Longitude of the top-left grid cell.",
        ),
        click.option(
            "--pace",
            "pace_seconds",
            type=float,
            default=None,
            help="Seconds to wait between coordinates (default: 1).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def collect_overrides(params: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the override values a command was invoked with."""
    return {k: params.get(k) for k in OVERRIDE_KEYS if params.get(k) is not None}


def report_config_error(error: ConfigError) -> None:
    """Print a configuration failure to stderr."""
    click.echo(f"Error: {error.message}", err=True)
    for problem in error.problems:
        click.echo(f"  - {problem}", err=True)
