"""
gridload CLI Commands

Commands:
    load - Walk the grid and load forecasts into the geo store
    plan - Show the grid a run would cover, without network access
"""

from cli.commands import load, plan

__all__ = [
    "load",
    "plan",
]
