from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from app.api.deps import get_weather_fetcher
from app.core.exceptions import MalformedForecastError, WeatherServiceError
from app.models.weather import WeatherLocation
from app.models.weather_alert import AlertThresholds, WeatherReport
from app.services.prediction_session import WeatherFetcher
from app.services.weather_alert_service import derive_alerts

router = APIRouter(prefix="/weather", tags=["Weather"])


@router.get(
    "/forecast",
    response_model=WeatherReport,
    response_model_exclude_none=True,
)
async def get_weather_forecast(
    lat: Optional[float] = Query(None, description="Latitude"),
    lon: Optional[float] = Query(None, description="Longitude"),
    q: Optional[str] = Query(None, description="Place name, e.g. 'Central Valley, California'"),
    fetch_snapshot: WeatherFetcher = Depends(get_weather_fetcher),
):
    """
    Get the normalized 5-day forecast and derived crop weather alerts.
    """
    try:
        if q:
            location = WeatherLocation(query=q)
        else:
            location = WeatherLocation(lat=lat, lon=lon)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Provide either lat and lon or a place name (q).",
        )

    try:
        snapshot = await fetch_snapshot(location)
    except (WeatherServiceError, MalformedForecastError) as e:
        raise HTTPException(
            status_code=e.status_code,
            detail="Could not fetch weather data for the location.",
        ) from e

    return WeatherReport(
        snapshot=snapshot,
        alerts=derive_alerts(snapshot, AlertThresholds.from_settings()),
    )
