"""
Weather provider client.

Fetches hourly forecasts from an OpenWeather One Call compatible endpoint.
Requests use metric units and exclude every block except hourly data.
There is no retry; a failed request surfaces as ProviderError and the
caller decides what to skip.
"""

import logging
from typing import Any, Dict, Optional

import requests

from core.exceptions import ConfigError, ProviderError
from core.forecast.models import ForecastBatch

logger = logging.getLogger(__name__)

UNITS = "metric"
EXCLUDE = "current,minutely,daily,alerts"


class OpenWeatherClient:
    """
    Client for the hourly forecast endpoint.

    Args:
        api_key: Provider credential, sent as ``appid``
        base_url: Full endpoint URL, e.g. https://api.openweathermap.org/data/3.0/onecall
        timeout: Request timeout in seconds
        session: Optional requests session (a new one is created otherwise)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ConfigError("Missing api key for weather provider")
        if not base_url:
            raise ConfigError("Missing base url for weather provider")
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._session = session or requests.Session()

    def _params(self, lat: float, lon: float) -> Dict[str, Any]:
        return {
            "appid": self.api_key,
            "lat": lat,
            "lon": lon,
            "units": UNITS,
            "exclude": EXCLUDE,
        }

    def fetch_forecast(self, lat: float, lon: float) -> ForecastBatch:
        """
        Fetch the hourly forecast for a coordinate.

        Args:
            lat: Latitude
            lon: Longitude

        Returns:
            ForecastBatch parsed from the response

        Raises:
            ProviderError: On network failure, non-2xx status or malformed payload
        """
        try:
            response = self._session.get(
                self.base_url,
                params=self._params(lat, lon),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProviderError(
                f"error on weather provider request: {e}", lat=lat, lon=lon
            ) from e

        if response.status_code < 200 or response.status_code > 299:
            raise ProviderError(
                f"error code {response.status_code} returned from weather provider",
                lat=lat,
                lon=lon,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(
                f"error decoding weather provider response: {e}",
                lat=lat,
                lon=lon,
                status_code=response.status_code,
            ) from e

        try:
            batch = ForecastBatch.from_dict(body)
        except ProviderError as e:
            e.lat, e.lon, e.status_code = lat, lon, response.status_code
            raise

        logger.debug(f"Fetched {len(batch.hourly)} hourly entries for {lat},{lon}")
        return batch

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "OpenWeatherClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
