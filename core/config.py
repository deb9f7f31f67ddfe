"""
Configuration for the Grid Load Job.

Settings can come from a YAML file, the environment, or a plain dictionary,
and are checked by LoaderConfig.validate() before any traversal or network
activity begins. A failed check raises ConfigError listing every problem.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from core.exceptions import ConfigError
from core.grid.stepper import Coordinate
from core.grid.walker import GridParameters
from core.store.geo import REDIS_SCHEMES, normalize_store_url
from core.store.writer import IdentityMode

logger = logging.getLogger(__name__)

# Environment variable names per field, first match wins
ENVIRONMENT_VARIABLES: Dict[str, Tuple[str, ...]] = {
    "step_distance_km": ("GRIDLOAD_STEP_DISTANCE_KM", "loader_stepdistance"),
    "duration_minutes": ("GRIDLOAD_DURATION_MINUTES", "loader_duration"),
    "start_lat": ("GRIDLOAD_START_LAT", "loader_start_lat"),
    "start_lon": ("GRIDLOAD_START_LON", "loader_start_lon"),
    "api_key": ("GRIDLOAD_API_KEY", "openweather_apikey"),
    "base_url": ("GRIDLOAD_BASE_URL", "openweather_baseurl"),
    "store_url": ("GRIDLOAD_STORE_URL", "redis_address"),
    "max_workers": ("GRIDLOAD_MAX_WORKERS",),
    "pace_seconds": ("GRIDLOAD_PACE_SECONDS",),
    "request_timeout_seconds": ("GRIDLOAD_REQUEST_TIMEOUT_SECONDS",),
    "identity_mode": ("GRIDLOAD_IDENTITY_MODE",),
}

_FLOAT_FIELDS = {"step_distance_km", "start_lat", "start_lon", "pace_seconds", "request_timeout_seconds"}
_INT_FIELDS = {"duration_minutes", "max_workers"}


@dataclass
class LoaderConfig:
    """
    Complete configuration for one population run.

    Attributes:
        step_distance_km: Ground distance between grid cells
        duration_minutes: Traversal time budget in whole minutes
        start_lat: Latitude of the top-left grid cell
        start_lon: Longitude of the top-left grid cell
        api_key: Weather provider credential
        base_url: Weather provider endpoint
        store_url: Geo store address (redis URL, host:port, or memory://)
        max_workers: Concurrent entry tasks
        pace_seconds: Delay between grid coordinates
        request_timeout_seconds: Provider request timeout
        identity_mode: Member identity scheme ("coordinate" or "random")
    """

    step_distance_km: Optional[float] = None
    duration_minutes: Optional[int] = None
    start_lat: Optional[float] = None
    start_lon: Optional[float] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    store_url: Optional[str] = None
    max_workers: int = 10
    pace_seconds: float = 1.0
    request_timeout_seconds: float = 30.0
    identity_mode: str = IdentityMode.COORDINATE.value

    @property
    def duration_seconds(self) -> int:
        """Traversal time budget in seconds."""
        return self.duration_minutes * 60

    @property
    def identity(self) -> IdentityMode:
        """Identity mode as an enum."""
        return IdentityMode(self.identity_mode)

    def grid_problems(self) -> List[str]:
        """Return problems with the grid settings only."""
        problems = []

        if self.step_distance_km is None:
            problems.append("step_distance_km is required")
        elif not self.step_distance_km > 0:
            problems.append(f"step_distance_km must be > 0, got {self.step_distance_km}")

        if self.duration_minutes is None:
            problems.append("duration_minutes is required")
        elif isinstance(self.duration_minutes, bool) or not isinstance(self.duration_minutes, int):
            problems.append(f"duration_minutes must be an integer, got {self.duration_minutes!r}")
        elif self.duration_minutes <= 0:
            problems.append(f"duration_minutes must be > 0, got {self.duration_minutes}")

        if self.start_lat is None:
            problems.append("start_lat is required")
        elif not -90 <= self.start_lat <= 90:
            problems.append(f"start_lat must be in [-90, 90], got {self.start_lat}")

        if self.start_lon is None:
            problems.append("start_lon is required")
        elif not -180 <= self.start_lon < 180:
            problems.append(f"start_lon must be in [-180, 180), got {self.start_lon}")

        if not self.pace_seconds >= 0:
            problems.append(f"pace_seconds must be >= 0, got {self.pace_seconds}")

        return problems

    def problems(self) -> List[str]:
        """Return every configuration problem found."""
        problems = self.grid_problems()

        if not self.api_key:
            problems.append("api_key is required")
        if not self.base_url:
            problems.append("base_url is required")
        if not self.store_url:
            problems.append("store_url is required")
        elif not self.store_url.startswith("memory://"):
            scheme = normalize_store_url(self.store_url).split("://", 1)[0]
            if scheme not in REDIS_SCHEMES:
                problems.append(
                    f"store_url scheme must be memory or one of {list(REDIS_SCHEMES)}, got {scheme!r}"
                )

        if self.max_workers < 1:
            problems.append(f"max_workers must be >= 1, got {self.max_workers}")
        if not self.request_timeout_seconds > 0:
            problems.append(
                f"request_timeout_seconds must be > 0, got {self.request_timeout_seconds}"
            )

        valid_modes = [m.value for m in IdentityMode]
        if self.identity_mode not in valid_modes:
            problems.append(
                f"identity_mode must be one of {valid_modes}, got {self.identity_mode!r}"
            )

        return problems

    def validate(self) -> "LoaderConfig":
        """
        Check the configuration.

        Returns:
            self, for chaining

        Raises:
            ConfigError: If any problem is found
        """
        problems = self.problems()
        if problems:
            raise ConfigError("Invalid loader configuration", problems)
        return self

    def grid_parameters(self) -> GridParameters:
        """Grid parameters for a validated configuration."""
        return GridParameters(
            step_distance_km=self.step_distance_km,
            duration_seconds=float(self.duration_seconds),
            start=Coordinate(lat=self.start_lat, lon=self.start_lon),
        )

    def merged(self, overrides: Dict[str, Any]) -> "LoaderConfig":
        """Return a copy with every non-None override applied."""
        values, problems = _coerce({k: v for k, v in overrides.items() if v is not None})
        if problems:
            raise ConfigError("Invalid configuration override", problems)
        return replace(self, **values)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "LoaderConfig":
        """
        Create configuration from dictionary.

        Args:
            config_dict: Configuration dictionary

        Returns:
            LoaderConfig instance
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        values, problems = _coerce({k: v for k, v in config_dict.items() if k in known})
        if problems:
            raise ConfigError("Invalid loader configuration", problems)
        return cls(**values)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "LoaderConfig":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            LoaderConfig instance
        """
        return cls.from_dict(_read_yaml(yaml_path))

    @classmethod
    def from_environment(cls, environ: Optional[Dict[str, str]] = None) -> "LoaderConfig":
        """
        Create configuration from environment variables.

        Each field reads the first set variable among its names in
        ENVIRONMENT_VARIABLES, e.g. GRIDLOAD_STEP_DISTANCE_KM or
        loader_stepdistance.

        Returns:
            LoaderConfig instance
        """
        values, problems = _coerce(_environment_values(environ))
        if problems:
            raise ConfigError("Invalid loader environment", problems)
        return cls(**values)

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "LoaderConfig":
        """
        Resolve configuration from every source.

        Precedence, lowest first: environment, YAML file, explicit overrides.
        The result is not validated; call validate() before use.
        """
        raw: Dict[str, Any] = _environment_values(environ)

        if config_path:
            raw.update(_read_yaml(config_path))

        if overrides:
            raw.update({k: v for k, v in overrides.items() if v is not None})

        return cls.from_dict(raw)

    def to_dict(self, redact: bool = True) -> Dict[str, Any]:
        """Convert configuration to dictionary, masking the credential."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if redact and data.get("api_key"):
            data["api_key"] = "***"
        return data


def _coerce(raw: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """Convert raw values (possibly strings) to field types."""
    values: Dict[str, Any] = {}
    problems: List[str] = []

    for name, value in raw.items():
        if value is None:
            continue
        try:
            if name in _FLOAT_FIELDS:
                if isinstance(value, bool):
                    raise ValueError(value)
                values[name] = float(value)
            elif name in _INT_FIELDS:
                if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
                    raise ValueError(value)
                values[name] = int(str(value).strip()) if isinstance(value, str) else int(value)
            else:
                values[name] = str(value)
        except (TypeError, ValueError):
            problems.append(f"invalid {name}: {value!r}")

    return values, problems


def _environment_values(environ: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Raw string values for every field set in the environment."""
    environ = os.environ if environ is None else environ
    raw = {}
    for name, variables in ENVIRONMENT_VARIABLES.items():
        for variable in variables:
            value = environ.get(variable)
            if value not in (None, ""):
                raw[name] = value
                break
    return raw


def _read_yaml(yaml_path: str) -> Dict[str, Any]:
    """Read the loader mapping from a YAML file."""
    path = Path(yaml_path).expanduser()
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {yaml_path}")

    try:
        with open(path, "r") as f:
            config_dict = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse configuration file {yaml_path}: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigError(f"Configuration file {yaml_path} must contain a mapping")

    # Extract loader section if present
    if "loader" in config_dict:
        config_dict = config_dict["loader"] or {}
        if not isinstance(config_dict, dict):
            raise ConfigError(f"Section 'loader' in {yaml_path} must be a mapping")
    return config_dict
