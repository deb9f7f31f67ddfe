"""
Grid Load CLI - Main Entry Point

Command-line interface for the forecast grid population job.
Built with Click for argument parsing and help generation.
"""

import sys
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
import dotenv

from core.config import LoaderConfig

# Configure logging for CLI
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("gridload")

VERSION = "0.1.0"


class GridloadContext:
    """Context object for passing global options to subcommands."""

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        config_path: Optional[Path] = None,
    ):
        self.verbose = verbose
        self.quiet = quiet
        self.config_path = config_path

        # Configure logging based on verbosity
        root = logging.getLogger()
        if quiet:
            root.setLevel(logging.WARNING)
        elif verbose:
            root.setLevel(logging.DEBUG)
        else:
            root.setLevel(logging.INFO)

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> LoaderConfig:
        """Resolve configuration from environment, config file and overrides."""
        config = LoaderConfig.load(
            config_path=str(self.config_path) if self.config_path else None,
            overrides=overrides,
        )
        if self.verbose:
            logger.debug(f"Resolved configuration: {config.to_dict()}")
        return config


class GridloadGroup(click.Group):
    """Custom Click group with improved help formatting."""

    def format_help(self, ctx, formatter):
        """Format help with custom banner and examples."""
        formatter.write_paragraph()
        formatter.write_text("gridload - Forecast Grid Population Job")
        formatter.write_paragraph()
        formatter.write_text(
            "Walk a grid of coordinates and load hourly forecasts into a geo store."
        )
        formatter.write_paragraph()

        super().format_help(ctx, formatter)

        formatter.write_paragraph()
        formatter.write_text("Examples:")
        formatter.indent()

        examples = [
            "# Preview the grid an hour-long run would cover",
            "gridload plan --step-km 10 --duration-minutes 60 --start-lat 45 --start-lon -120",
            "",
            "# Load using settings from .env or the environment",
            "gridload load",
            "",
            "# Try a run against an in-memory store",
            "gridload -c gridload.yaml load --dry-run",
        ]

        for line in examples:
            formatter.write_text(line)

        formatter.dedent()


pass_context = click.make_pass_decorator(GridloadContext, ensure=True)


@click.group(cls=GridloadGroup)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Enable verbose output (debug logging).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Quiet mode (only warnings and errors).",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to YAML configuration file.",
)
@click.option(
    "--env-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to a .env file (default: .env in the working directory).",
)
@click.version_option(
    version=VERSION,
    prog_name="gridload",
    message="%(prog)s version %(version)s",
)
@click.pass_context
def app(ctx, verbose: bool, quiet: bool, config_path: Optional[Path], env_file: Optional[Path]):
    """
    gridload - Forecast Grid Population Job

    Fetches hourly forecasts across a square grid of coordinates and
    writes valid records into a geo-indexed store.
    """
    if verbose and quiet:
        raise click.UsageError("Cannot use both --verbose and --quiet")

    if env_file is not None:
        dotenv.load_dotenv(env_file)
    else:
        dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))

    ctx.obj = GridloadContext(
        verbose=verbose,
        quiet=quiet,
        config_path=config_path,
    )


def register_commands():
    """Register all subcommands."""
    from cli.commands import load, plan

    app.add_command(load.load)
    app.add_command(plan.plan)


@app.command("info")
@pass_context
def info(ctx):
    """Display package versions and the resolved configuration."""
    import importlib.metadata
    import platform

    click.echo("\n=== gridload System Info ===\n")

    click.echo(f"Python: {platform.python_version()}")
    click.echo(f"Platform: {platform.system()} {platform.release()}")

    click.echo("\n--- Package Versions ---")
    for pkg in ["click", "PyYAML", "requests", "redis", "python-dotenv"]:
        try:
            version = importlib.metadata.version(pkg)
            click.echo(f"  {pkg}: {version}")
        except importlib.metadata.PackageNotFoundError:
            click.echo(f"  {pkg}: not installed")

    click.echo("\n--- Configuration ---")
    config = ctx.load_config()
    for key, value in config.to_dict().items():
        click.echo(f"  {key}: {value if value is not None else 'N/A'}")

    problems = config.problems()
    if problems:
        click.echo("\n--- Problems ---")
        for problem in problems:
            click.echo(f"  {problem}")

    click.echo()


register_commands()


def main():
    """Main entry point for the CLI."""
    try:
        app()
    except Exception as e:
        logger.error(f"Error: {e}")
        if "--verbose" in sys.argv or "-v" in sys.argv:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
