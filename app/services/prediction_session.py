from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional, Union

from pydantic import Field, ValidationError

from app.collections.prediction_history import HistoryStore
from app.core.exceptions import (
    AgriYieldError,
    InvalidLocationError,
    PredictionParseError,
    PredictionServiceError,
)
from app.models.prediction import CamelModel, PredictionFormData, PredictionResult
from app.models.weather import WeatherLocation, WeatherSnapshot
from app.models.weather_alert import AlertThresholds, WeatherAlert

from .prediction_service import predict_yield
from .structured_generation import StructuredGenerator
from .weather_alert_service import derive_alerts
from .weather_service import get_weather_snapshot, parse_location

logger = logging.getLogger(__name__)

WEATHER_ERROR_MESSAGE = "Could not fetch weather data for the location."
PREDICTION_ERROR_MESSAGE = "Failed to get prediction. Please check your inputs and try again."

WEATHER = "weather"
PREDICTION = "prediction"

WeatherFetcher = Callable[[WeatherLocation], Awaitable[WeatherSnapshot]]


class SessionState(CamelModel):
    weather: Optional[WeatherSnapshot] = None
    weather_alerts: List[WeatherAlert] = Field(default_factory=list)
    weather_error: Optional[str] = None
    is_weather_loading: bool = False
    form_data: Optional[PredictionFormData] = None
    prediction: Optional[PredictionResult] = None
    prediction_error: Optional[str] = None
    is_predicting: bool = False


StateListener = Callable[[SessionState], Awaitable[None]]


def _coerce_location(location) -> WeatherLocation:
    """Accepts a form string, a ``{"lat", "lon"}`` / ``{"query"}`` mapping or a WeatherLocation."""
    if isinstance(location, WeatherLocation):
        return location
    if isinstance(location, str):
        return parse_location(location)
    try:
        return WeatherLocation.model_validate(location)
    except ValidationError as exc:
        raise InvalidLocationError(f"Unusable location {location!r}") from exc


class RequestGate:
    """
    Hands out increasing request ids per concern so that a response is only
    applied when no newer request for the same concern has been issued.
    """

    def __init__(self) -> None:
        self._latest: dict[str, int] = {}
        self._counter = 0

    def issue(self, concern: str) -> int:
        self._counter += 1
        self._latest[concern] = self._counter
        return self._counter

    def is_current(self, concern: str, request_id: int) -> bool:
        return self._latest.get(concern) == request_id

    def invalidate(self, concern: Optional[str] = None) -> None:
        if concern is None:
            for key in list(self._latest):
                self.issue(key)
        else:
            self.issue(concern)


class PredictionSession:
    """
    Per-client prediction workflow: location → weather + alerts, form →
    prediction + history. Each concern fails independently and only the
    latest request per concern may update the state.
    """

    def __init__(
        self,
        *,
        generator: StructuredGenerator,
        history: HistoryStore,
        weather_fetcher: WeatherFetcher = get_weather_snapshot,
        thresholds: Optional[AlertThresholds] = None,
        on_change: Optional[StateListener] = None,
    ) -> None:
        self.generator = generator
        self.history = history
        self.weather_fetcher = weather_fetcher
        self.thresholds = thresholds or AlertThresholds.from_settings()
        self.on_change = on_change
        self.gate = RequestGate()
        self._state = SessionState()

    def state(self) -> SessionState:
        return self._state.model_copy(deep=True)

    async def _update(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        if self.on_change is not None:
            await self.on_change(self.state())

    async def set_location(
        self, location: Union[str, dict, WeatherLocation, None]
    ) -> Optional[WeatherSnapshot]:
        if location is None or (isinstance(location, str) and not location.strip()):
            self.gate.invalidate(WEATHER)
            await self._update(
                weather=None, weather_alerts=[], weather_error=None, is_weather_loading=False
            )
            return None

        request_id = self.gate.issue(WEATHER)
        await self._update(is_weather_loading=True, weather_error=None, weather_alerts=[])

        snapshot: Optional[WeatherSnapshot] = None
        error: Optional[AgriYieldError] = None
        try:
            snapshot = await self.weather_fetcher(_coerce_location(location))
        except AgriYieldError as e:
            error = e

        if not self.gate.is_current(WEATHER, request_id):
            logger.info("Discarding superseded weather response #%d", request_id)
            return None

        if error is not None:
            logger.warning("Weather lookup failed: %s", error.message)
            await self._update(
                weather=None,
                weather_alerts=[],
                weather_error=WEATHER_ERROR_MESSAGE,
                is_weather_loading=False,
            )
            return None

        await self._update(
            weather=snapshot,
            weather_alerts=derive_alerts(snapshot, self.thresholds),
            weather_error=None,
            is_weather_loading=False,
        )
        return snapshot

    async def submit_prediction(
        self, form_data: PredictionFormData
    ) -> Optional[PredictionResult]:
        request_id = self.gate.issue(PREDICTION)
        snapshot = self._state.weather
        await self._update(
            form_data=form_data, prediction=None, prediction_error=None, is_predicting=True
        )

        try:
            result = await predict_yield(form_data, snapshot, generator=self.generator)
        except (PredictionParseError, PredictionServiceError) as e:
            logger.warning("Prediction failed for %s: %s", form_data.crop_type, e.message)
            if self.gate.is_current(PREDICTION, request_id):
                await self._update(
                    prediction_error=PREDICTION_ERROR_MESSAGE, is_predicting=False
                )
            return None

        await self.history.append(form_data, result)

        if not self.gate.is_current(PREDICTION, request_id):
            logger.info("Discarding superseded prediction response #%d", request_id)
            return None

        await self._update(prediction=result, is_predicting=False)
        return result

    async def reset(self) -> None:
        self.gate.invalidate()
        self._state = SessionState()
        if self.on_change is not None:
            await self.on_change(self.state())
