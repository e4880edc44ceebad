"""
Tests for the REST and WebSocket endpoints.
"""

import asyncio

import pytest
from conftest import FakeGenerator
from fastapi.testclient import TestClient

from app.api.deps import (
    get_history_store,
    get_structured_generator,
    get_weather_fetcher,
)
from app.api.websocket.manager import SessionConnection
from app.collections.key_value_store import InMemoryKeyValueStore
from app.collections.prediction_history import HistoryStore
from app.core.exceptions import PredictionParseError, WeatherServiceError
from app.main import app


class Overrides:
    """Mutable dependency doubles shared by a test and the app."""

    def __init__(self, snapshot):
        self.generator = FakeGenerator()
        self.history = HistoryStore(InMemoryKeyValueStore(), key="apiHistory")
        self.snapshot = snapshot
        self.weather_error = None
        self.locations = []

    async def fetch(self, location):
        self.locations.append(location)
        if self.weather_error is not None:
            raise self.weather_error
        return self.snapshot


@pytest.fixture
def overrides(make_snapshot):
    doubles = Overrides(
        make_snapshot(
            [
                ("Mon, Oct 19", 1, 18, "clear sky"),
                ("Tue, Oct 20", 10, 36, "thunderstorm with heavy rain"),
            ]
        )
    )
    app.dependency_overrides[get_structured_generator] = lambda: doubles.generator
    app.dependency_overrides[get_history_store] = lambda: doubles.history
    app.dependency_overrides[get_weather_fetcher] = lambda: doubles.fetch
    yield doubles
    app.dependency_overrides.clear()


@pytest.fixture
def client(overrides):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def form_payload():
    return {
        "cropType": "Wheat",
        "location": "Lat: 18.5204, Lng: 73.8567",
        "soilType": "Loamy",
        "rainfall": 800,
        "temperature": 24,
        "pesticideUsage": False,
        "fertilizerType": "NPK",
        "area": 2.5,
    }


class TestRoot:
    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "message" in response.json()


class TestWeather:
    def test_forecast_with_alerts(self, client, overrides):
        response = client.get("/weather/forecast", params={"q": "Pune"})

        assert response.status_code == 200
        data = response.json()
        assert len(data["snapshot"]["forecast"]) == 2
        assert [alert["category"] for alert in data["alerts"]] == ["Frost", "Heatwave", "Storm"]
        assert data["alerts"][2]["message"] == (
            "Severe Weather: Potential storms forecasted. (thunderstorm with heavy rain on Tue)"
        )
        assert overrides.locations[0].query == "Pune"

    def test_forecast_by_coordinates(self, client, overrides):
        response = client.get("/weather/forecast", params={"lat": 18.52, "lon": 73.85})

        assert response.status_code == 200
        assert overrides.locations[0].to_query_params() == {"lat": 18.52, "lon": 73.85}

    def test_forecast_requires_a_location(self, client):
        response = client.get("/weather/forecast")
        assert response.status_code == 422

    def test_provider_failure_is_service_unavailable(self, client, overrides):
        overrides.weather_error = WeatherServiceError("status 500")

        response = client.get("/weather/forecast", params={"q": "Pune"})

        assert response.status_code == 503
        assert response.json()["detail"] == "Could not fetch weather data for the location."


class TestPredictions:
    def test_prediction_is_returned_and_recorded(
        self, client, overrides, form_payload, prediction_payload
    ):
        overrides.generator.payload = prediction_payload

        response = client.post("/predictions", json={"formData": form_payload})

        assert response.status_code == 200
        assert response.json()["predictedYield"] == 4.2
        assert response.json()["recommendations"][0]["potentialYieldIncrease"] == 8

        history = client.get("/history").json()
        assert len(history) == 1
        assert history[0]["formData"]["cropType"] == "Wheat"

    def test_supplied_weather_is_embedded(
        self, client, overrides, form_payload, prediction_payload
    ):
        overrides.generator.payload = prediction_payload
        weather = overrides.snapshot.model_dump(mode="json")

        response = client.post(
            "/predictions", json={"formData": form_payload, "weather": weather}
        )

        assert response.status_code == 200
        assert "- Tue, Oct 20: High 36°C, Low 10°C" in overrides.generator.calls[0]["prompt"]
        assert overrides.locations == []

    def test_include_forecast_fetches_for_form_location(
        self, client, overrides, form_payload, prediction_payload
    ):
        overrides.generator.payload = prediction_payload

        response = client.post(
            "/predictions", json={"formData": form_payload, "includeForecast": True}
        )

        assert response.status_code == 200
        assert overrides.locations[0].lat == 18.5204
        assert "Weather Forecast Data" in overrides.generator.calls[0]["prompt"]

    def test_weather_failure_does_not_block_prediction(
        self, client, overrides, form_payload, prediction_payload
    ):
        overrides.generator.payload = prediction_payload
        overrides.weather_error = WeatherServiceError("status 500")

        response = client.post(
            "/predictions", json={"formData": form_payload, "includeForecast": True}
        )

        assert response.status_code == 200
        assert "does not account for short-term weather events" in (
            overrides.generator.calls[0]["prompt"]
        )

    @pytest.mark.parametrize("field, value", [("area", 0), ("location", " ")])
    def test_invalid_form_is_rejected(self, client, overrides, form_payload, field, value):
        form_payload[field] = value

        response = client.post("/predictions", json={"formData": form_payload})

        assert response.status_code == 422
        assert overrides.generator.calls == []

    def test_ai_failure_returns_single_message_and_records_nothing(
        self, client, overrides, form_payload
    ):
        overrides.generator.error = PredictionParseError("bad schema")

        response = client.post("/predictions", json={"formData": form_payload})

        assert response.status_code == 502
        assert response.json()["detail"] == (
            "Failed to get prediction. Please check your inputs and try again."
        )
        assert client.get("/history").json() == []


class TestCrops:
    def test_crop_profile(self, client, overrides, crop_info_payload):
        overrides.generator.payload = crop_info_payload

        response = client.get("/crops/Wheat")

        assert response.status_code == 200
        assert response.json()["idealConditions"]["temperatureRange"] == "12-25°C"

    def test_crop_profile_failure(self, client, overrides):
        overrides.generator.error = RuntimeError("network down")

        response = client.get("/crops/Wheat")

        assert response.status_code == 503


class TestHistory:
    def test_clear_and_analytics(self, client, overrides, form_payload, prediction_payload):
        overrides.generator.payload = prediction_payload
        client.post("/predictions", json={"formData": form_payload})
        client.post(
            "/predictions",
            json={"formData": {**form_payload, "cropType": "Rice", "location": "Pune"}},
        )

        analytics = client.get("/history/analytics").json()
        assert analytics["totalPredictions"] == 2
        assert [c["cropType"] for c in analytics["cropDistribution"]] == ["Rice", "Wheat"]
        assert len(analytics["locations"]) == 1

        assert client.delete("/history").status_code == 204
        assert client.get("/history").json() == []


class TestWebSocket:
    def test_state_and_location_flow(self, client, overrides):
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"action": "state"})
            initial = websocket.receive_json()
            assert initial["action"] == "state"
            assert initial["data"]["weather"] is None

            websocket.send_json({"action": "set_location", "data": {"location": "Pune"}})
            loading = websocket.receive_json()
            loaded = websocket.receive_json()

        assert loading["data"]["isWeatherLoading"] is True
        assert loaded["data"]["isWeatherLoading"] is False
        assert len(loaded["data"]["weatherAlerts"]) == 3

    def test_prediction_flow(self, client, overrides, form_payload, prediction_payload):
        overrides.generator.payload = prediction_payload

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"action": "predict", "data": {"formData": form_payload}})
            pending = websocket.receive_json()
            done = websocket.receive_json()

        assert pending["data"]["isPredicting"] is True
        assert done["data"]["prediction"]["predictedYield"] == 4.2

    def test_invalid_form_is_reported(self, client, overrides, form_payload):
        form_payload["area"] = 0

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"action": "predict", "data": {"formData": form_payload}})
            message = websocket.receive_json()

        assert message["action"] == "predict"
        assert "error" in message

    def test_unknown_action(self, client):
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"action": "launch"})
            assert websocket.receive_text() == "Unknown action: launch"

    def test_coordinate_location_flow(self, client, overrides):
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json(
                {"action": "set_location", "data": {"location": {"lat": 18.52, "lon": 73.85}}}
            )
            websocket.receive_json()
            loaded = websocket.receive_json()

        assert loaded["data"]["isWeatherLoading"] is False
        assert loaded["data"]["weatherError"] is None
        assert overrides.locations[0].lat == 18.52


@pytest.mark.asyncio
async def test_failed_action_task_is_logged(caplog):
    connection = SessionConnection(websocket=None)

    async def explode():
        raise RuntimeError("boom")

    task = connection.spawn(explode())
    with pytest.raises(RuntimeError):
        await task
    await asyncio.sleep(0)

    assert connection.tasks == set()
    assert "Action task failed" in caplog.text
