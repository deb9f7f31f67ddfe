"""
Grid geometry for the population job.

Provides the coordinate stepper (east/south moves with longitude
wraparound) and the walker that covers a square grid sized from a time
budget.
"""

from core.grid.stepper import (
    KM_PER_DEGREE,
    Coordinate,
    km_per_degree_lon,
    move_down,
    move_right,
)
from core.grid.walker import GridCell, GridParameters, GridWalker

__all__ = [
    "KM_PER_DEGREE",
    "Coordinate",
    "km_per_degree_lon",
    "move_down",
    "move_right",
    "GridCell",
    "GridParameters",
    "GridWalker",
]
