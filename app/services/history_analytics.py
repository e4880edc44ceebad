from typing import List

from app.core.exceptions import InvalidLocationError
from app.models.prediction import (
    CropCount,
    HistoricalPrediction,
    HistoryAnalytics,
    LocationMarker,
    YieldPoint,
)

from .weather_service import COORDINATES_PATTERN, parse_location


def _yield_series(history: List[HistoricalPrediction]) -> List[YieldPoint]:
    points = [
        YieldPoint(
            label=f"{item.form_data.crop_type[:10]} ({item.date.year}) #{idx}",
            predicted_yield=item.result.predicted_yield,
            yield_unit=item.result.yield_unit,
        )
        for idx, item in enumerate(history, start=1)
    ]
    points.reverse()
    return points


def _crop_distribution(history: List[HistoricalPrediction]) -> List[CropCount]:
    counts: dict[str, int] = {}
    for item in history:
        counts[item.form_data.crop_type] = counts.get(item.form_data.crop_type, 0) + 1
    return [CropCount(crop_type=crop, count=count) for crop, count in counts.items()]


def _location_markers(history: List[HistoricalPrediction]) -> List[LocationMarker]:
    markers: List[LocationMarker] = []
    for item in history:
        if not COORDINATES_PATTERN.search(item.form_data.location):
            continue
        try:
            location = parse_location(item.form_data.location)
        except InvalidLocationError:
            continue
        markers.append(
            LocationMarker(
                lat=location.lat,
                lon=location.lon,
                crop_type=item.form_data.crop_type,
                predicted_yield=item.result.predicted_yield,
                yield_unit=item.result.yield_unit,
            )
        )
    return markers


def summarize_history(history: List[HistoricalPrediction]) -> HistoryAnalytics:
    """
    Aggregates a most-recent-first history for the analytics view.

    The yield series is returned oldest-first; each label carries the entry's
    position in the most-recent-first list.
    """
    return HistoryAnalytics(
        total_predictions=len(history),
        yield_series=_yield_series(history),
        crop_distribution=_crop_distribution(history),
        locations=_location_markers(history),
    )
