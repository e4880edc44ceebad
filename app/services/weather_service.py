import re
from typing import Optional

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import (
    InvalidLocationError,
    MalformedForecastError,
    WeatherServiceError,
)
from app.models.weather import ForecastResponse, WeatherLocation, WeatherSnapshot

from .forecast_normalizer import normalize_forecast

# Location string produced when a field is drawn on the map
COORDINATES_PATTERN = re.compile(r"Lat: ([-.\d]+), Lng: ([-.\d]+)")


def parse_location(value: Optional[str]) -> WeatherLocation:
    """
    Interprets a form location as coordinates or a free-text place name.

    Args:
        value: Either ``"Lat: 12.3456, Lng: 78.9012"`` or a place name.

    Returns:
        A WeatherLocation.

    Raises:
        InvalidLocationError: if the value is empty or the coordinates are out of range.
    """
    if value is None or not value.strip():
        raise InvalidLocationError()

    match = COORDINATES_PATTERN.search(value)
    try:
        if match:
            return WeatherLocation(lat=float(match.group(1)), lon=float(match.group(2)))
        return WeatherLocation(query=value.strip())
    except (ValueError, ValidationError) as exc:
        raise InvalidLocationError(f"Unusable location '{value}'") from exc


async def _request_forecast(client: httpx.AsyncClient, params: dict) -> httpx.Response:
    try:
        return await client.get(f"{settings.OPENWEATHERMAP_BASE_URL}/forecast", params=params)
    except httpx.HTTPError as exc:
        raise WeatherServiceError(f"Weather API request failed: {exc}") from exc


async def fetch_forecast(
    location: WeatherLocation,
    client: Optional[httpx.AsyncClient] = None,
) -> ForecastResponse:
    """
    Fetches the 5-day / 3-hour forecast for a location.

    Args:
        location: Coordinates or place name.
        client: Optional shared client; a short-lived one is opened otherwise.

    Returns:
        The provider envelope with raw samples.

    Raises:
        WeatherServiceError: on missing configuration, transport errors,
            non-200 responses or an error code in the body.
    """
    if not settings.OPENWEATHERMAP_API_KEY:
        raise WeatherServiceError("Weather API key is not configured.")

    params = {
        **location.to_query_params(),
        "appid": settings.OPENWEATHERMAP_API_KEY,
        "units": "metric",
    }
    if client is None:
        async with httpx.AsyncClient() as owned_client:
            response = await _request_forecast(owned_client, params)
    else:
        response = await _request_forecast(client, params)

    if response.status_code != 200:
        raise WeatherServiceError(
            f"Weather API request failed with status {response.status_code}",
            provider_status=response.status_code,
        )

    try:
        forecast = ForecastResponse.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise MalformedForecastError("Weather API returned an unreadable body") from exc

    if forecast.cod != "200":
        raise WeatherServiceError(f"Weather API error: {forecast.message}")
    return forecast


async def get_weather_snapshot(
    location: WeatherLocation,
    client: Optional[httpx.AsyncClient] = None,
) -> WeatherSnapshot:
    forecast = await fetch_forecast(location, client=client)
    utc_offset = forecast.city.timezone if forecast.city else 0
    return normalize_forecast(
        forecast.list,
        horizon_days=settings.FORECAST_HORIZON_DAYS,
        utc_offset_seconds=utc_offset,
    )

