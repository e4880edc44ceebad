import math
from collections import Counter
from datetime import date, timedelta
from typing import Iterable, List, Union

from pydantic import ValidationError

from app.core.exceptions import MalformedForecastError
from app.models.weather import (
    CurrentConditions,
    ForecastDay,
    ForecastSample,
    WeatherSnapshot,
)

DEFAULT_HORIZON_DAYS = 5


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_day_label(day: date) -> str:
    """'Mon, Oct 19' style label; the alert engine keys on the weekday part."""
    return f"{day.strftime('%a')}, {day.strftime('%b')} {day.day}"


def _validate_samples(raw_samples: Iterable[Union[dict, ForecastSample]]) -> List[ForecastSample]:
    samples: List[ForecastSample] = []
    try:
        for raw in raw_samples:
            if isinstance(raw, ForecastSample):
                samples.append(raw)
            else:
                samples.append(ForecastSample.model_validate(raw))
    except ValidationError as exc:
        raise MalformedForecastError(
            f"Forecast sample {len(samples)} is malformed: {exc.error_count()} validation error(s)"
        ) from exc
    except TypeError as exc:
        raise MalformedForecastError("Forecast samples must be a list of objects") from exc

    if not samples:
        raise MalformedForecastError("Forecast contains no samples")
    return samples


def _summarize_day(label: str, items: List[ForecastSample]) -> ForecastDay:
    temps = [item.main.temp for item in items]
    counts = Counter(item.condition.description for item in items)
    # max() keeps the first maximal key, so ties go to the first-encountered description
    description = max(counts, key=counts.__getitem__)
    icon = next(
        item.condition.icon
        for item in items
        if item.condition.description == description
    )
    return ForecastDay(
        date=label,
        temp_max=round_half_up(max(temps)),
        temp_min=round_half_up(min(temps)),
        description=description,
        icon=icon,
    )


def normalize_forecast(
    raw_samples: Iterable[Union[dict, ForecastSample]],
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    utc_offset_seconds: int = 0,
) -> WeatherSnapshot:
    """
    Collapses irregular provider samples into one record per calendar day.

    Args:
        raw_samples: Provider forecast entries (``dt``, ``main.temp``, ``weather[0]``).
        horizon_days: Number of leading calendar days to keep.
        utc_offset_seconds: Location offset from UTC used for day boundaries.

    Returns:
        A WeatherSnapshot with at most ``horizon_days`` days in ascending order.

    Raises:
        MalformedForecastError: if the input is empty or any sample is malformed.
    """
    samples = _validate_samples(raw_samples)
    offset = timedelta(seconds=utc_offset_seconds)

    daily: dict[date, List[ForecastSample]] = {}
    for sample in samples:
        day = (sample.dt + offset).date()
        daily.setdefault(day, []).append(sample)

    forecast = [
        _summarize_day(format_day_label(day), daily[day])
        for day in sorted(daily)[:horizon_days]
    ]

    earliest = min(samples, key=lambda item: item.dt)
    current = CurrentConditions(
        temp=round_half_up(earliest.main.temp),
        description=earliest.condition.description,
        icon=earliest.condition.icon,
    )
    return WeatherSnapshot(current=current, forecast=forecast)
