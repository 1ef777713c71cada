"""
Temperature Provider - current temperature from the Visual Crossing timeline API.

Failures never propagate: any transport, status or payload problem is logged
and reported as the UNAVAILABLE sentinel.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from wildwatch.common.config import TemperatureConfig
from wildwatch.common.errors import TemperatureFetchError
from wildwatch.common.schemas import UNAVAILABLE, Temperature

logger = logging.getLogger(__name__)


def parse_temperature(payload: Any) -> float:
    """Extract ``currentConditions.temp`` from a timeline response."""
    try:
        value = payload["currentConditions"]["temp"]
    except (KeyError, TypeError) as exc:
        raise TemperatureFetchError("Response has no currentConditions.temp") from exc
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TemperatureFetchError(f"Temperature is not numeric: {value!r}")
    return float(value)


class TemperatureProvider:
    def __init__(self, config: TemperatureConfig | None = None) -> None:
        self.config = config or TemperatureConfig()

    def url_for(self, location: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{location}"

    def _request(self, location: str) -> float:
        api_key = self.config.resolved_api_key
        if not api_key:
            raise TemperatureFetchError("No weather API key configured")
        params = {"unitGroup": "metric", "key": api_key, "contentType": "json"}
        try:
            response = requests.get(
                self.url_for(location), params=params, timeout=self.config.timeout_seconds
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise TemperatureFetchError(f"Weather request failed: {exc}") from exc
        return parse_temperature(payload)

    def fetch_current(self, location: str | None = None) -> Temperature:
        location = location or self.config.location
        try:
            temperature = self._request(location)
        except TemperatureFetchError as exc:
            logger.warning("Temperature unavailable for %s: %s", location, exc)
            return UNAVAILABLE
        logger.info("Current temperature for %s: %.1f", location, temperature)
        return temperature
