"""
Exceptions for the Grid Load Job.

Provides the error hierarchy used across the loader. Only ConfigError is
fatal; the remaining errors are scoped to a single coordinate or a single
hourly entry and are logged by the orchestrator.
"""


class GridLoadError(Exception):
    """
    Base exception for grid load failures.

    Attributes:
        message: Human-readable error description
        details: Additional context about the failure
    """

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigError(GridLoadError):
    """
    Configuration is missing or invalid.

    Raised before any traversal or network activity begins. Aborts the run.

    Attributes:
        problems: Every problem found while validating the configuration
    """

    def __init__(self, message: str, problems: list = None):
        problems = problems or []
        details = {"problems": "; ".join(problems)} if problems else None
        super().__init__(message, details)
        self.problems = problems


class ProviderError(GridLoadError):
    """
    Forecast provider request failed.

    Raised on network failure, non-2xx response, or malformed payload.
    The coordinate is skipped and traversal continues.

    Attributes:
        lat: Latitude of the failed request
        lon: Longitude of the failed request
        status_code: HTTP status code, if a response was received
    """

    def __init__(
        self,
        message: str,
        lat: float = None,
        lon: float = None,
        status_code: int = None,
    ):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.lat = lat
        self.lon = lon
        self.status_code = status_code


class ValidationError(GridLoadError):
    """
    Hourly forecast entry is structurally incomplete.

    The entry is dropped without a store write.

    Attributes:
        timestamp: Epoch of the rejected entry
    """

    def __init__(self, message: str, timestamp: int = None):
        super().__init__(message)
        self.timestamp = timestamp


class StoreError(GridLoadError):
    """
    Geo store write failed.

    The entry is dropped; no retry.

    Attributes:
        key: Store key of the failed write
        original_error: The underlying exception that caused the failure
    """

    def __init__(self, message: str, key: str = None, original_error: Exception = None):
        details = {}
        if key is not None:
            details["key"] = key
        if original_error is not None:
            details["original_error"] = str(original_error)
        super().__init__(message, details)
        self.key = key
        self.original_error = original_error
