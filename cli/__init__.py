"""
gridload CLI Package

Command-line interface for the forecast grid population job.

Usage:
    gridload plan --step-km 10 --duration-minutes 60 --start-lat 45 --start-lon -120
    gridload load
    gridload -c gridload.yaml load --dry-run
"""

__version__ = "0.1.0"

from cli.main import app

__all__ = ["app", "__version__"]
