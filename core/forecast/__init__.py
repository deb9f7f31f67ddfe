"""
Forecast provider access and record validation.

This module provides:
- Typed forecast batch, entry and condition models
- OpenWeather hourly forecast client
- Structural validation of hourly entries
"""

from core.forecast.models import Condition, ForecastBatch, ForecastEntry
from core.forecast.client import OpenWeatherClient
from core.forecast.validation import (
    MISSING_WEATHER,
    MISSING_WEATHER_DESCRIPTION,
    MISSING_WEATHER_ID,
    MISSING_WEATHER_MAIN,
    ValidationResult,
    ensure_valid,
    validate_entry,
)

__all__ = [
    "Condition",
    "ForecastBatch",
    "ForecastEntry",
    "OpenWeatherClient",
    "MISSING_WEATHER",
    "MISSING_WEATHER_DESCRIPTION",
    "MISSING_WEATHER_ID",
    "MISSING_WEATHER_MAIN",
    "ValidationResult",
    "ensure_valid",
    "validate_entry",
]
