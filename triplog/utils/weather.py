"""
Weather API Integration for triplog

Uses Open-Meteo API (free, no API key required) to look up the outside
temperature at the start of a trip.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, cast

import requests

from triplog.config import Config
from triplog.exceptions import WeatherAPIError

logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_HISTORICAL_URL = "https://archive-api.open-meteo.com/v1/archive"


def build_hourly_params(latitude: float, longitude: float, when: datetime) -> Dict[str, Any]:
    """Query parameters shared by the archive and forecast endpoints."""
    date_str = when.strftime("%Y-%m-%d")
    return {
        "latitude": latitude,
        "longitude": longitude,
        "start_date": date_str,
        "end_date": date_str,
        "hourly": "temperature_2m",
        "temperature_unit": "fahrenheit",
        "timezone": "auto",
    }


def _request_json(url: str, params: Dict[str, Any], timeout: float) -> Dict[str, Any]:
    """
    Make a single HTTP GET request and decode the JSON body.

    Raises:
        WeatherAPIError: On timeout, connection failure, non-2xx status or invalid JSON
    """
    latitude = params.get("latitude")
    longitude = params.get("longitude")

    try:
        response = requests.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        return cast(Dict[str, Any], response.json())

    except requests.exceptions.Timeout as e:
        raise WeatherAPIError(
            f"Weather API timeout: {url}", latitude=latitude, longitude=longitude
        ) from e

    except requests.exceptions.HTTPError as e:
        status_code = e.response.status_code if e.response is not None else None
        raise WeatherAPIError(
            f"Weather API HTTP error: {e}", latitude=latitude, longitude=longitude, status_code=status_code
        ) from e

    except requests.exceptions.JSONDecodeError as e:
        raise WeatherAPIError(
            "Weather API returned invalid JSON", latitude=latitude, longitude=longitude
        ) from e

    except requests.exceptions.RequestException as e:
        raise WeatherAPIError(
            f"Weather API connection error: {e}", latitude=latitude, longitude=longitude
        ) from e


def _extract_hourly_temperature(data: Dict[str, Any], hour: int) -> Optional[float]:
    """Pick hourly.temperature_2m[hour]; None when the series is short or the entry is null."""
    hourly = data.get("hourly") if isinstance(data, dict) else None
    if not isinstance(hourly, dict):
        return None

    temps = hourly.get("temperature_2m") or []
    if hour >= len(temps):
        return None

    value = temps[hour]
    if value is None:
        return None

    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _fetch_from(
    url: str, latitude: float, longitude: float, when: datetime, timeout: float
) -> Optional[float]:
    """Query one Open-Meteo endpoint; failures are logged and reported as None."""
    params = build_hourly_params(latitude, longitude, when)

    try:
        data = _request_json(url, params, timeout)
    except WeatherAPIError as e:
        logger.warning(str(e))
        return None

    temperature = _extract_hourly_temperature(data, when.hour)
    if temperature is None:
        logger.debug(f"No temperature at hour {when.hour} from {url} for ({latitude}, {longitude}) on {params['start_date']}")
    return temperature


def get_hourly_temperature(
    latitude: float,
    longitude: float,
    when: datetime,
    timeout: Optional[float] = None
) -> Optional[float]:
    """
    Look up the temperature (°F) at a location for the hour of ``when``.

    Tries the historical archive first. Recent dates are not in the archive
    yet, so any failure or missing value there is retried once against the
    forecast API, which also serves the recent past.

    Args:
        latitude: GPS latitude
        longitude: GPS longitude
        when: Local trip start time; its date and hour select the value
        timeout: Request timeout in seconds (defaults to Config.WEATHER_API_TIMEOUT)

    Returns:
        Temperature in Fahrenheit, or None if neither source had a usable value
    """
    if timeout is None:
        timeout = Config.WEATHER_API_TIMEOUT

    temperature = _fetch_from(OPEN_METEO_HISTORICAL_URL, latitude, longitude, when, timeout)
    if temperature is not None:
        return temperature

    return _fetch_from(OPEN_METEO_URL, latitude, longitude, when, timeout)
