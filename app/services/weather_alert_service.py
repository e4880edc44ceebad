from typing import List, Optional

from app.models.weather import ForecastDay, WeatherSnapshot
from app.models.weather_alert import AlertCategory, AlertThresholds, WeatherAlert

DEFAULT_THRESHOLDS = AlertThresholds()

CATEGORY_ORDER = (AlertCategory.FROST, AlertCategory.HEATWAVE, AlertCategory.STORM)


def _day_name(day: ForecastDay) -> str:
    return day.date.split(",")[0]


def _format_threshold(value: float) -> str:
    return f"{value:g}"


def _is_storm(description: str, keywords: tuple[str, ...]) -> bool:
    lowered = description.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def derive_alerts(
    snapshot: Optional[WeatherSnapshot],
    thresholds: Optional[AlertThresholds] = None,
) -> List[WeatherAlert]:
    """
    Classifies a forecast into aggregated frost, heatwave and storm alerts.

    Pure and total: a missing snapshot or an empty forecast yields no alerts.
    Each category produces at most one message covering all of its days, and
    categories are emitted as Frost, Heatwave, Storm.
    """
    if snapshot is None:
        return []
    thresholds = thresholds or DEFAULT_THRESHOLDS

    frost_days: List[str] = []
    heatwave_days: List[str] = []
    storm_days: List[tuple[str, str]] = []

    for day in snapshot.forecast:
        if day.temp_min <= thresholds.frost_c:
            frost_days.append(_day_name(day))
        if day.temp_max >= thresholds.heatwave_c:
            heatwave_days.append(_day_name(day))
        if _is_storm(day.description, thresholds.storm_keywords):
            storm_days.append((_day_name(day), day.description))

    messages: dict[AlertCategory, str] = {}
    if frost_days:
        messages[AlertCategory.FROST] = (
            f"Frost Risk: Low temperatures below {_format_threshold(thresholds.frost_c)}°C "
            f"expected on {', '.join(frost_days)}."
        )
    if heatwave_days:
        messages[AlertCategory.HEATWAVE] = (
            f"Heatwave Warning: High temperatures above {_format_threshold(thresholds.heatwave_c)}°C "
            f"expected on {', '.join(heatwave_days)}."
        )
    if storm_days:
        details = "; ".join(f"{description} on {name}" for name, description in storm_days)
        messages[AlertCategory.STORM] = (
            f"Severe Weather: Potential storms forecasted. ({details})"
        )

    alerts: List[WeatherAlert] = []
    seen: set[str] = set()
    for category in CATEGORY_ORDER:
        message = messages.get(category)
        if message is None or message in seen:
            continue
        seen.add(message)
        alerts.append(WeatherAlert(category=category, message=message))
    return alerts
