"""
Tests for Loader Configuration.

Tests cover:
- Reading settings from the environment, YAML files and dictionaries
- Source precedence
- Validation problems and the fatal ConfigError
"""

import math

import pytest

from core.config import LoaderConfig
from core.exceptions import ConfigError
from core.grid.stepper import Coordinate
from core.store.writer import IdentityMode


@pytest.fixture
def valid_config():
    """Provide a complete, valid configuration."""
    return LoaderConfig(
        step_distance_km=10.0,
        duration_minutes=60,
        start_lat=45.0,
        start_lon=-120.0,
        api_key="secret",
        base_url="https://api.example.test/onecall",
        store_url="redis://localhost:6379/0",
    )


class TestFromEnvironment:
    """Tests for reading the environment."""

    def test_loader_variable_names(self, loader_environment):
        """Test the loader_* / openweather_* / redis_address names."""
        config = LoaderConfig.from_environment(loader_environment)

        assert config.step_distance_km == 111.2
        assert config.duration_minutes == 1
        assert config.start_lat == 0.0
        assert config.start_lon == 0.0
        assert config.api_key == "test-key"
        assert config.base_url == "https://api.example.test/data/3.0/onecall"
        assert config.store_url == "localhost:6379"
        assert config.problems() == []

    def test_prefixed_names_take_priority(self, loader_environment):
        """Test GRIDLOAD_* variables win over the short names."""
        environ = dict(loader_environment, GRIDLOAD_STEP_DISTANCE_KM="25", GRIDLOAD_MAX_WORKERS="4")
        config = LoaderConfig.from_environment(environ)

        assert config.step_distance_km == 25.0
        assert config.max_workers == 4

    def test_empty_values_ignored(self):
        """Test empty variables count as unset."""
        config = LoaderConfig.from_environment({"loader_stepdistance": "", "loader_duration": "5"})
        assert config.step_distance_km is None
        assert config.duration_minutes == 5

    def test_defaults(self):
        """Test defaults when nothing is set."""
        config = LoaderConfig.from_environment({})

        assert config.max_workers == 10
        assert config.pace_seconds == 1.0
        assert config.request_timeout_seconds == 30.0
        assert config.identity == IdentityMode.COORDINATE

    def test_unparseable_value(self):
        """Test unparseable numbers raise ConfigError naming the field."""
        with pytest.raises(ConfigError) as exc_info:
            LoaderConfig.from_environment({"loader_duration": "1.5", "loader_start_lat": "north"})

        assert "invalid duration_minutes: '1.5'" in exc_info.value.problems
        assert "invalid start_lat: 'north'" in exc_info.value.problems


class TestFromDict:
    """Tests for dictionary and YAML sources."""

    def test_from_dict(self):
        """Test values are coerced to field types."""
        config = LoaderConfig.from_dict(
            {"step_distance_km": 5, "duration_minutes": 2.0, "start_lat": "10.5", "start_lon": -3}
        )
        assert config.step_distance_km == 5.0
        assert isinstance(config.step_distance_km, float)
        assert config.duration_minutes == 2
        assert config.start_lat == 10.5

    def test_unknown_keys_ignored(self, caplog):
        """Test unknown keys are warned about and dropped."""
        config = LoaderConfig.from_dict({"step_distance_km": 5, "colour": "blue"})
        assert config.step_distance_km == 5.0
        assert "colour" in caplog.text

    def test_bool_rejected(self):
        """Test booleans are not accepted as numbers."""
        with pytest.raises(ConfigError, match="duration_minutes"):
            LoaderConfig.from_dict({"duration_minutes": True})

    def test_from_yaml_loader_section(self, tmp_path):
        """Test a YAML file with a loader section."""
        path = tmp_path / "gridload.yaml"
        path.write_text("loader:\n  step_distance_km: 12.5\n  duration_minutes: 30\n")

        config = LoaderConfig.from_yaml(str(path))

        assert config.step_distance_km == 12.5
        assert config.duration_minutes == 30

    def test_from_yaml_flat(self, tmp_path):
        """Test a YAML file without a section."""
        path = tmp_path / "gridload.yaml"
        path.write_text("start_lat: 1.0\nstart_lon: 2.0\n")

        config = LoaderConfig.from_yaml(str(path))

        assert (config.start_lat, config.start_lon) == (1.0, 2.0)

    def test_from_yaml_missing_file(self, tmp_path):
        """Test a missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            LoaderConfig.from_yaml(str(tmp_path / "absent.yaml"))

    def test_from_yaml_not_mapping(self, tmp_path):
        """Test a non-mapping document raises ConfigError."""
        path = tmp_path / "gridload.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            LoaderConfig.from_yaml(str(path))

    def test_from_yaml_parse_error(self, tmp_path):
        """Test malformed YAML raises ConfigError."""
        path = tmp_path / "gridload.yaml"
        path.write_text("loader: [unclosed\n")
        with pytest.raises(ConfigError, match="parse"):
            LoaderConfig.from_yaml(str(path))


class TestLoad:
    """Tests for resolving every source."""

    def test_precedence(self, tmp_path, loader_environment):
        """Test environment < YAML file < overrides."""
        path = tmp_path / "gridload.yaml"
        path.write_text("loader:\n  step_distance_km: 20\n  duration_minutes: 5\n")

        config = LoaderConfig.load(
            config_path=str(path),
            overrides={"duration_minutes": 7, "start_lat": None},
            environ=loader_environment,
        )

        assert config.step_distance_km == 20.0
        assert config.duration_minutes == 7
        assert config.start_lat == 0.0
        assert config.api_key == "test-key"

    def test_load_is_not_validated(self):
        """Test load returns incomplete configurations unchecked."""
        config = LoaderConfig.load(environ={})
        assert config.step_distance_km is None

    def test_merged(self, valid_config):
        """Test merged applies non-None overrides to a copy."""
        merged = valid_config.merged({"pace_seconds": "0", "start_lat": None})

        assert merged.pace_seconds == 0.0
        assert merged.start_lat == 45.0
        assert valid_config.pace_seconds == 1.0

    def test_merged_invalid(self, valid_config):
        """Test invalid overrides raise ConfigError."""
        with pytest.raises(ConfigError):
            valid_config.merged({"max_workers": "many"})


class TestValidate:
    """Tests for validation."""

    def test_valid(self, valid_config):
        """Test a complete configuration validates and chains."""
        assert valid_config.validate() is valid_config

    def test_empty_reports_every_missing_field(self):
        """Test every missing required field is reported at once."""
        with pytest.raises(ConfigError) as exc_info:
            LoaderConfig().validate()

        problems = exc_info.value.problems
        for name in (
            "step_distance_km",
            "duration_minutes",
            "start_lat",
            "start_lon",
            "api_key",
            "base_url",
            "store_url",
        ):
            assert f"{name} is required" in problems

    @pytest.mark.parametrize(
        "field,value,fragment",
        [
            ("step_distance_km", 0.0, "step_distance_km must be > 0"),
            ("step_distance_km", -5.0, "step_distance_km must be > 0"),
            ("step_distance_km", math.nan, "step_distance_km must be > 0"),
            ("duration_minutes", 0, "duration_minutes must be > 0"),
            ("start_lat", 91.0, "start_lat must be in [-90, 90]"),
            ("start_lon", 180.0, "start_lon must be in [-180, 180)"),
            ("start_lon", -180.5, "start_lon must be in [-180, 180)"),
            ("pace_seconds", -1.0, "pace_seconds must be >= 0"),
            ("max_workers", 0, "max_workers must be >= 1"),
            ("request_timeout_seconds", 0.0, "request_timeout_seconds must be > 0"),
            ("identity_mode", "sequential", "identity_mode must be one of"),
            ("store_url", "http://cache:6379", "store_url scheme"),
        ],
    )
    def test_invalid_values(self, valid_config, field, value, fragment):
        """Test each out-of-range value is reported."""
        setattr(valid_config, field, value)

        with pytest.raises(ConfigError) as exc_info:
            valid_config.validate()

        assert any(fragment in p for p in exc_info.value.problems)

    @pytest.mark.parametrize("store_url", ["memory://", "localhost:6379", "rediss://cache:6380/1", "unix:///tmp/redis.sock"])
    def test_accepted_store_urls(self, valid_config, store_url):
        """Test the supported store address forms."""
        valid_config.store_url = store_url
        assert valid_config.problems() == []

    def test_grid_problems_ignore_provider(self, valid_config):
        """Test grid checks do not require provider or store settings."""
        valid_config.api_key = None
        valid_config.store_url = None
        assert valid_config.grid_problems() == []
        assert len(valid_config.problems()) == 2

    def test_error_message_lists_problems(self):
        """Test the error string carries every problem."""
        error = ConfigError("Invalid loader configuration", ["a is required", "b is required"])
        assert str(error) == "Invalid loader configuration (problems=a is required; b is required)"


class TestDerivedValues:
    """Tests for derived values."""

    def test_duration_seconds(self, valid_config):
        """Test the minute budget converts to seconds."""
        assert valid_config.duration_seconds == 3600

    def test_grid_parameters(self, valid_config):
        """Test grid parameters are built from the configuration."""
        params = valid_config.grid_parameters()

        assert params.step_distance_km == 10.0
        assert params.duration_seconds == 3600.0
        assert params.start == Coordinate(45.0, -120.0)
        assert params.grid_side == 60.0

    def test_identity(self, valid_config):
        """Test the identity mode enum."""
        valid_config.identity_mode = "random"
        assert valid_config.identity == IdentityMode.RANDOM

    def test_to_dict_redacts_key(self, valid_config):
        """Test the credential is masked unless asked otherwise."""
        assert valid_config.to_dict()["api_key"] == "***"
        assert valid_config.to_dict(redact=False)["api_key"] == "secret"
        assert valid_config.to_dict()["store_url"] == "redis://localhost:6379/0"
