"""
Forecast data model.

Typed views over the hourly forecast payload returned by the weather
provider. Parsing is lenient about missing fields (they take zero values and
are rejected later by the validator) but strict about wrong types.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from core.exceptions import ProviderError


def _lower_keys(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ProviderError(f"malformed {what}: expected object, got {type(data).__name__}")
    return {str(k).lower(): v for k, v in data.items()}


def _as_number(value: Any, what: str, cast=float):
    if value is None:
        return cast(0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ProviderError(f"malformed {what}: expected number, got {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ProviderError(f"malformed {what}: expected finite number, got {value!r}")
        if cast is int and not value.is_integer():
            raise ProviderError(f"malformed {what}: expected integer, got {value!r}")
    try:
        return cast(value)
    except (OverflowError, ValueError) as e:
        raise ProviderError(f"malformed {what}: {e}") from e


def _as_string(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ProviderError(f"malformed {what}: expected string, got {value!r}")
    return value


def _as_list(value: Any, what: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ProviderError(f"malformed {what}: expected array, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Condition:
    """
    A weather condition attached to an hourly forecast.

    Attributes:
        id: Provider condition code (0 means absent)
        main: Condition group, e.g. "Rain"
        description: Condition detail, e.g. "light rain"
        icon: Provider icon code
    """

    id: int = 0
    main: str = ""
    description: str = ""
    icon: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "main": self.main,
            "description": self.description,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Condition":
        """Create from a provider condition object."""
        d = _lower_keys(data, "weather condition")
        return cls(
            id=_as_number(d.get("id"), "weather condition id", int),
            main=_as_string(d.get("main"), "weather condition main"),
            description=_as_string(d.get("description"), "weather condition description"),
            icon=_as_string(d.get("icon"), "weather condition icon"),
        )


@dataclass(frozen=True)
class ForecastEntry:
    """
    One hour of forecast for a coordinate.

    Attributes:
        timestamp: Forecast hour as Unix epoch seconds
        conditions: Weather conditions, most significant first
        precipitation_probability: Probability of precipitation in [0, 1]
    """

    timestamp: int
    conditions: Tuple[Condition, ...] = field(default_factory=tuple)
    precipitation_probability: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary using the provider's field names."""
        return {
            "dt": self.timestamp,
            "weather": [c.to_dict() for c in self.conditions],
            "pop": self.precipitation_probability,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ForecastEntry":
        """Create from a provider hourly object."""
        d = _lower_keys(data, "hourly entry")
        weather = _as_list(d.get("weather"), "hourly weather")
        return cls(
            timestamp=_as_number(d.get("dt"), "hourly dt", int),
            conditions=tuple(Condition.from_dict(w) for w in weather),
            precipitation_probability=_as_number(d.get("pop"), "hourly pop"),
        )


@dataclass(frozen=True)
class ForecastBatch:
    """
    Full provider response for one coordinate.

    Attributes:
        lat: Latitude echoed by the provider
        lon: Longitude echoed by the provider
        hourly: Hourly entries in forecast order
    """

    lat: float
    lon: float
    hourly: Tuple[ForecastEntry, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "lat": self.lat,
            "lon": self.lon,
            "hourly": [h.to_dict() for h in self.hourly],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ForecastBatch":
        """Create from a One Call response body."""
        d = _lower_keys(data, "forecast response")
        hourly: List[ForecastEntry] = [
            ForecastEntry.from_dict(h) for h in _as_list(d.get("hourly"), "hourly")
        ]
        return cls(
            lat=_as_number(d.get("lat"), "lat"),
            lon=_as_number(d.get("lon"), "lon"),
            hourly=tuple(hourly),
        )
