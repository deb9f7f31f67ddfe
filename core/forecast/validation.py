"""
Forecast Record Validator.

Checks a single hourly forecast entry for structural completeness before it
is written to the store. Only the first weather condition is inspected.
"""

from dataclasses import dataclass
from typing import Optional

from core.exceptions import ValidationError
from core.forecast.models import ForecastEntry

MISSING_WEATHER = "missing hourly weather"
MISSING_WEATHER_ID = "missing hourly weather id"
MISSING_WEATHER_MAIN = "missing hourly weather main type"
MISSING_WEATHER_DESCRIPTION = "missing hourly weather type description"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one entry; message is set only on failure."""

    valid: bool
    message: Optional[str] = None


def validate_entry(entry: ForecastEntry) -> ValidationResult:
    """
    Validate an hourly entry, stopping at the first failed check.

    Checks, in order: conditions present, condition id non-zero, main type
    present, description present.
    """
    if not entry.conditions:
        return ValidationResult(False, MISSING_WEATHER)

    first = entry.conditions[0]
    if first.id == 0:
        return ValidationResult(False, MISSING_WEATHER_ID)
    if not first.main:
        return ValidationResult(False, MISSING_WEATHER_MAIN)
    if not first.description:
        return ValidationResult(False, MISSING_WEATHER_DESCRIPTION)

    return ValidationResult(True)


def ensure_valid(entry: ForecastEntry) -> None:
    """Raise ValidationError if the entry fails validation."""
    result = validate_entry(entry)
    if not result.valid:
        raise ValidationError(result.message, timestamp=entry.timestamp)
