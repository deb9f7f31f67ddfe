"""
Coordinate Stepper.

Advances a coordinate by a fixed ground distance, either rightward
(increasing longitude) or downward (decreasing latitude), on a
spherical-earth approximation.
"""

import math
from dataclasses import dataclass
from typing import Dict

# Length of one degree of latitude, treated as constant
KM_PER_DEGREE = 111.2


@dataclass(frozen=True)
class Coordinate:
    """
    A geographic position in decimal degrees.

    Attributes:
        lat: Latitude, nominally in [-90, 90]
        lon: Longitude in [-180, 180)
    """

    lat: float
    lon: float

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {"lat": self.lat, "lon": self.lon}

    def __str__(self) -> str:
        return f"{self.lat},{self.lon}"


def km_per_degree_lon(lat: float) -> float:
    """Ground length of one degree of longitude at the given latitude."""
    return KM_PER_DEGREE * math.cos(lat * math.pi / 180)


def move_right(coordinate: Coordinate, step_distance_km: float) -> Coordinate:
    """
    Move a coordinate east by step_distance_km.

    Degrees of longitude shrink toward the poles, so the angular step grows
    with latitude. Longitude wraps from 180 back to -180. Not defined at the
    poles, where the degree length reaches zero.

    Args:
        coordinate: Starting position
        step_distance_km: Ground distance to move

    Returns:
        New coordinate with longitude in [-180, 180)
    """
    # shift into [0, 360) so the wrap is a plain modulo
    shifted = coordinate.lon + 180
    shifted = shifted + step_distance_km / km_per_degree_lon(coordinate.lat)
    shifted = shifted % 360
    return Coordinate(lat=coordinate.lat, lon=shifted - 180)


def move_down(coordinate: Coordinate, step_distance_km: float) -> Coordinate:
    """Move a coordinate south by step_distance_km. Latitude is not clamped."""
    return Coordinate(
        lat=coordinate.lat - step_distance_km / KM_PER_DEGREE,
        lon=coordinate.lon,
    )
