import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import (
    get_history_store,
    get_structured_generator,
    get_weather_fetcher,
)
from app.collections.prediction_history import HistoryStore
from app.core.exceptions import (
    AgriYieldError,
    PredictionParseError,
    PredictionServiceError,
)
from app.models.prediction import PredictionRequest, PredictionResult
from app.services.prediction_service import predict_yield
from app.services.prediction_session import PREDICTION_ERROR_MESSAGE, WeatherFetcher
from app.services.structured_generation import StructuredGenerator
from app.services.weather_service import parse_location

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/predictions", tags=["Prediction"])


@router.post("", response_model=PredictionResult)
async def create_prediction(
    request: PredictionRequest,
    generator: StructuredGenerator = Depends(get_structured_generator),
    history: HistoryStore = Depends(get_history_store),
    fetch_snapshot: WeatherFetcher = Depends(get_weather_fetcher),
) -> PredictionResult:
    """
    Predicts the yield for the submitted farm and records it in the history.

    A weather failure never blocks the prediction; it only drops the forecast
    from the request.
    """
    snapshot = request.weather
    if snapshot is None and request.include_forecast:
        try:
            snapshot = await fetch_snapshot(parse_location(request.form_data.location))
        except AgriYieldError as e:
            logger.warning(
                "Predicting without weather for '%s': %s",
                request.form_data.location,
                e.message,
            )

    try:
        result = await predict_yield(request.form_data, snapshot, generator=generator)
    except (PredictionParseError, PredictionServiceError) as e:
        raise HTTPException(status_code=e.status_code, detail=PREDICTION_ERROR_MESSAGE) from e

    await history.append(request.form_data, result)
    return result
