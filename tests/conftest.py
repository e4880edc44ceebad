"""Shared fixtures: fake AI generator, forecast sample builders, in-memory history."""

from datetime import datetime, timedelta, timezone

import pytest

from app.collections.key_value_store import InMemoryKeyValueStore
from app.collections.prediction_history import HistoryStore
from app.models.prediction import PredictionFormData
from app.models.weather import CurrentConditions, ForecastDay, WeatherSnapshot

# Monday
BASE_TIME = datetime(2026, 10, 19, 0, 0, tzinfo=timezone.utc)


class FakeGenerator:
    """StructuredGenerator stand-in that records calls."""

    def __init__(self, payload=None, error: Exception | None = None):
        self.payload = payload
        self.error = error
        self.calls: list[dict] = []

    async def generate(self, prompt, system_instruction, output_schema):
        self.calls.append(
            {
                "prompt": prompt,
                "system_instruction": system_instruction,
                "output_schema": output_schema,
            }
        )
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def prediction_payload():
    return {
        "predictedYield": 4.2,
        "yieldUnit": "tons/hectare",
        "confidenceScore": 0.82,
        "summary": "Good conditions for wheat.",
        "weatherImpactAnalysis": "Mild temperatures favour grain filling.",
        "recommendations": [
            {
                "title": "Split nitrogen application",
                "description": "Apply nitrogen in two doses.",
                "impact": "High",
                "potentialYieldIncrease": 8,
            }
        ],
        "riskFactors": ["Late frost"],
    }


@pytest.fixture
def crop_info_payload():
    return {
        "cropName": "Wheat",
        "description": "A temperate cereal grain.",
        "idealConditions": {
            "soilType": ["Loamy", "Clay loam"],
            "temperatureRange": "12-25°C",
            "annualRainfall": "450-650 mm",
        },
        "commonPests": ["Aphids", "Rust"],
        "growingCycle": "110-130 days",
    }


@pytest.fixture
def form_data():
    return PredictionFormData(
        crop_type="Wheat",
        location="Pune, India",
        soil_type="Loamy",
        rainfall=800,
        temperature=24.5,
        pesticide_usage=True,
        fertilizer_type="Organic",
        area=2.5,
    )


@pytest.fixture
def make_sample():
    def _make(hours_from_base: float, temp: float, description: str = "clear sky", icon: str = "01d"):
        moment = BASE_TIME + timedelta(hours=hours_from_base)
        return {
            "dt": int(moment.timestamp()),
            "main": {"temp": temp},
            "weather": [{"description": description, "icon": icon}],
        }

    return _make


@pytest.fixture
def make_snapshot():
    def _make(days, current_temp: float = 20):
        forecast = [
            ForecastDay(
                date=label,
                temp_min=temp_min,
                temp_max=temp_max,
                description=description,
                icon="01d",
            )
            for label, temp_min, temp_max, description in days
        ]
        return WeatherSnapshot(
            current=CurrentConditions(temp=current_temp, description="clear sky", icon="01d"),
            forecast=forecast,
        )

    return _make


@pytest.fixture
def history_store():
    return HistoryStore(InMemoryKeyValueStore(), key="testHistory")
