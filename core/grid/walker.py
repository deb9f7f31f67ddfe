"""
Grid Walker.

Derives a square grid from a time budget and walks it row by row, one
coordinate per time step. The walk is paced at one coordinate per second by
default, so a budget of N seconds gives a grid side of sqrt(N) cells.

Example:
    params = GridParameters(step_distance_km=10, duration_seconds=3600,
                            start=Coordinate(45.0, -120.0))
    for coordinate in GridWalker(params):
        ...
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Iterator

from core.grid.stepper import Coordinate, move_down, move_right

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridParameters:
    """
    Immutable parameters for one traversal.

    Attributes:
        step_distance_km: Ground distance between neighbouring cells
        duration_seconds: Time budget for the traversal
        start: Top-left cell of the grid
    """

    step_distance_km: float
    duration_seconds: float
    start: Coordinate

    def __post_init__(self):
        """Validate parameters."""
        if self.step_distance_km <= 0:
            raise ValueError(f"step_distance_km must be > 0, got {self.step_distance_km}")
        if self.duration_seconds <= 0:
            raise ValueError(f"duration_seconds must be > 0, got {self.duration_seconds}")

    @property
    def grid_side(self) -> float:
        """Unrounded grid side length, sqrt(duration_seconds)."""
        return math.sqrt(self.duration_seconds)


@dataclass(frozen=True)
class GridCell:
    """A visited cell addressed by its 1-based column and row."""

    column: int
    row: int
    coordinate: Coordinate


class GridWalker:
    """
    Single-pass walker over the grid.

    Emits the current coordinate, steps right, and wraps to the start of
    the next row once the column counter passes the grid side. After the
    last row it restores the start coordinate and stops. A walker cannot be
    restarted; construct a new one to walk again.
    """

    def __init__(
        self,
        params: GridParameters,
        pace_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.params = params
        self.pace_seconds = pace_seconds
        self._sleep = sleep

        self.current = params.start
        self.column = 1
        self.row = 1
        self.max_column = params.grid_side
        self.max_row = params.grid_side
        self._started = False
        self.exhausted = False

    @property
    def cell_count(self) -> int:
        """Number of coordinates a full walk emits."""
        columns = math.floor(self.max_column) or 1
        rows = math.ceil(self.max_row)
        return columns * rows

    def iter_cells(self) -> Iterator[GridCell]:
        """Walk the grid, yielding each cell with its column and row."""
        if self._started:
            raise RuntimeError("GridWalker is single-pass; create a new walker")
        self._started = True

        step = self.params.step_distance_km
        start = self.params.start

        logger.info(
            f"Walking grid from {start} with side {self.max_column:.3f} "
            f"({self.cell_count} cells, {step} km steps)"
        )

        while True:
            yield GridCell(column=self.column, row=self.row, coordinate=self.current)

            self.column += 1
            self.current = move_right(self.current, step)
            if self.column > self.max_column:
                self.column = 1
                if self.row < self.max_row:
                    self.row += 1
                    self.current = Coordinate(
                        lat=move_down(self.current, step).lat,
                        lon=start.lon,
                    )
                else:
                    self.row = 1
                    self.current = start
                    self.exhausted = True
                    logger.info("Grid traversal complete")
                    return

            if self.pace_seconds > 0:
                self._sleep(self.pace_seconds)

    def coordinates(self) -> Iterator[Coordinate]:
        """Walk the grid, yielding coordinates only."""
        for cell in self.iter_cells():
            yield cell.coordinate

    def __iter__(self) -> Iterator[Coordinate]:
        return self.coordinates()
