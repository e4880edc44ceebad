from datetime import datetime, timezone

from app.models.prediction import HistoricalPrediction, PredictionResult
from app.services.history_analytics import summarize_history


def _entry(entry_id, form_data, prediction_payload, crop, location, yield_value, year=2026):
    result = PredictionResult.model_validate({**prediction_payload, "predictedYield": yield_value})
    return HistoricalPrediction(
        id=entry_id,
        date=datetime(year, 6, 1, tzinfo=timezone.utc),
        form_data=form_data.model_copy(update={"crop_type": crop, "location": location}),
        result=result,
    )


def test_empty_history():
    analytics = summarize_history([])
    assert analytics.total_predictions == 0
    assert analytics.yield_series == []
    assert analytics.crop_distribution == []
    assert analytics.locations == []


def test_summary_of_most_recent_first_history(form_data, prediction_payload):
    history = [
        _entry("3", form_data, prediction_payload, "Sugarcane Co-86032", "Lat: 18.5204, Lng: 73.8567", 80.0),
        _entry("2", form_data, prediction_payload, "Wheat", "Pune, India", 4.1, year=2025),
        _entry("1", form_data, prediction_payload, "Wheat", "Lat: -1.2921, Lng: 36.8219", 3.6, year=2025),
    ]

    analytics = summarize_history(history)

    assert analytics.total_predictions == 3
    assert [point.label for point in analytics.yield_series] == [
        "Wheat (2025) #3",
        "Wheat (2025) #2",
        "Sugarcane  (2026) #1",
    ]
    assert [point.predicted_yield for point in analytics.yield_series] == [3.6, 4.1, 80.0]
    assert [(c.crop_type, c.count) for c in analytics.crop_distribution] == [
        ("Sugarcane Co-86032", 1),
        ("Wheat", 2),
    ]
    assert [(m.lat, m.lon, m.crop_type) for m in analytics.locations] == [
        (18.5204, 73.8567, "Sugarcane Co-86032"),
        (-1.2921, 36.8219, "Wheat"),
    ]
