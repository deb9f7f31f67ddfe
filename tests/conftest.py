"""
Pytest configuration and fixtures for gridload tests.

Markers:
    @pytest.mark.grid - Coordinate stepper and grid walker tests
    @pytest.mark.forecast - Provider client, models and validation tests
    @pytest.mark.store - Geo store and record writer tests
    @pytest.mark.ingestion - Orchestrator tests
    @pytest.mark.cli - Command line tests
    @pytest.mark.slow - Tests that take longer to run

Usage:
    pytest -m grid               # Run only grid tests
    pytest -m "not slow"         # Skip slow tests
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "grid: Coordinate stepper and grid walker tests")
    config.addinivalue_line("markers", "forecast: Forecast provider and validation tests")
    config.addinivalue_line("markers", "store: Geo store and writer tests")
    config.addinivalue_line("markers", "ingestion: Ingestion orchestrator tests")
    config.addinivalue_line("markers", "cli: Command line tests")
    config.addinivalue_line("markers", "slow: Slow-running tests")


def pytest_collection_modifyitems(config, items):
    """Auto-apply markers based on test file names."""
    for item in items:
        basename = item.fspath.basename
        for marker in ("grid", "forecast", "store", "ingestion", "cli"):
            if marker in basename and not item.get_closest_marker(marker):
                item.add_marker(getattr(pytest.mark, marker))

        test_name = item.name.lower()
        if "large" in test_name or "stress" in test_name:
            item.add_marker(pytest.mark.slow)


def make_hourly(timestamp=1700000000, weather_id=500, main="Rain",
                description="light rain", icon="10d", pop=0.4):
    """Build a provider-shaped hourly entry."""
    return {
        "dt": timestamp,
        "temp": 11.5,
        "weather": [
            {"id": weather_id, "main": main, "description": description, "icon": icon}
        ],
        "pop": pop,
    }


@pytest.fixture
def hourly_payload():
    """Provide a single valid provider hourly entry."""
    return make_hourly()


@pytest.fixture
def forecast_payload():
    """Provide a One Call response with three hourly entries, one invalid."""
    return {
        "lat": 45.0,
        "lon": -120.0,
        "timezone": "America/Los_Angeles",
        "hourly": [
            make_hourly(timestamp=1700000000),
            make_hourly(timestamp=1700003600, main="Clouds", description="overcast clouds", weather_id=804),
            make_hourly(timestamp=1700007200, weather_id=0),
        ],
    }


@pytest.fixture
def forecast_batch(forecast_payload):
    """Provide a parsed ForecastBatch."""
    from core.forecast.models import ForecastBatch

    return ForecastBatch.from_dict(forecast_payload)


@pytest.fixture
def memory_store():
    """Provide an empty in-memory geo store."""
    from core.store.geo import MemoryGeoStore

    return MemoryGeoStore()


@pytest.fixture
def mock_response():
    """Build mock HTTP responses."""

    def _make(status_code=200, payload=None, json_error=None):
        response = MagicMock()
        response.status_code = status_code
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = payload
        return response

    return _make


@pytest.fixture
def loader_environment():
    """Provide a complete environment using the short loader variable names."""
    return {
        "loader_stepdistance": "111.2",
        "loader_duration": "1",
        "loader_start_lat": "0",
        "loader_start_lon": "0",
        "openweather_apikey": "test-key",
        "openweather_baseurl": "https://api.example.test/data/3.0/onecall",
        "redis_address": "localhost:6379",
    }
