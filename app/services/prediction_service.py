import json
import logging
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.core.exceptions import (
    AgriYieldError,
    PredictionParseError,
    PredictionServiceError,
)
from app.models.crop_info import CropInfo
from app.models.prediction import PredictionFormData, PredictionResult
from app.models.weather import WeatherSnapshot
from app.prompts.crop_info_system_prompt import CROP_INFO_PROMPT, CROP_INFO_SYSTEM_PROMPT
from app.prompts.yield_prediction_system_prompt import (
    NO_WEATHER_SECTION,
    WEATHER_FORECAST_SECTION,
    YIELD_PREDICTION_PROMPT,
    YIELD_PREDICTION_SYSTEM_PROMPT,
)

from .structured_generation import StructuredGenerator, StructuredPayload

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _build_weather_section(snapshot: Optional[WeatherSnapshot]) -> str:
    if snapshot is None:
        return NO_WEATHER_SECTION

    forecast_lines = "\n".join(
        f"- {day.date}: High {_format_number(day.temp_max)}°C, "
        f"Low {_format_number(day.temp_min)}°C, {day.description}"
        for day in snapshot.forecast
    )
    return WEATHER_FORECAST_SECTION.format(
        current_temp=_format_number(snapshot.current.temp),
        current_description=snapshot.current.description,
        horizon_days=len(snapshot.forecast),
        forecast_lines=forecast_lines,
    )


def build_prediction_prompt(
    form_data: PredictionFormData,
    snapshot: Optional[WeatherSnapshot] = None,
) -> str:
    """Farm parameters plus either the forecast narrative or the no-weather instruction."""
    return YIELD_PREDICTION_PROMPT.format(
        crop_type=form_data.crop_type,
        location=form_data.location,
        soil_type=form_data.soil_type,
        rainfall=_format_number(form_data.rainfall),
        temperature=_format_number(form_data.temperature),
        pesticide_usage="Yes" if form_data.pesticide_usage else "No",
        fertilizer_type=form_data.fertilizer_type,
        area=_format_number(form_data.area),
        weather_section=_build_weather_section(snapshot),
    )


def parse_structured_payload(payload: StructuredPayload, schema: Type[ModelT]) -> ModelT:
    """
    Validates a structured-generation payload against its schema.

    Raises:
        PredictionParseError: if the payload is not JSON or does not conform.
    """
    if isinstance(payload, str):
        try:
            payload = json.loads(payload.strip())
        except ValueError as exc:
            raise PredictionParseError(
                f"AI returned invalid JSON for {schema.__name__}"
            ) from exc
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise PredictionParseError(
            f"AI response did not match the {schema.__name__} schema",
            errors=exc.errors(include_url=False, include_context=False),
        ) from exc


async def _generate(
    generator: StructuredGenerator,
    prompt: str,
    system_instruction: str,
    schema: Type[ModelT],
    failure_message: str,
) -> ModelT:
    try:
        payload = await generator.generate(prompt, system_instruction, schema)
    except AgriYieldError:
        raise
    except Exception as exc:
        logger.exception("Structured generation for %s failed", schema.__name__)
        raise PredictionServiceError(failure_message) from exc
    return parse_structured_payload(payload, schema)


async def predict_yield(
    form_data: PredictionFormData,
    snapshot: Optional[WeatherSnapshot] = None,
    *,
    generator: StructuredGenerator,
) -> PredictionResult:
    """
    Requests a yield prediction for the farm, optionally weather-aware.

    Raises:
        PredictionServiceError: if the AI call fails.
        PredictionParseError: if the AI response is not a valid PredictionResult.
    """
    prompt = build_prediction_prompt(form_data, snapshot)
    result = await _generate(
        generator,
        prompt,
        YIELD_PREDICTION_SYSTEM_PROMPT,
        PredictionResult,
        "Failed to fetch prediction from AI model.",
    )
    logger.info(
        "Predicted %s %s for %s (weather=%s)",
        result.predicted_yield,
        result.yield_unit,
        form_data.crop_type,
        snapshot is not None,
    )
    return result


async def get_crop_info(crop_name: str, *, generator: StructuredGenerator) -> CropInfo:
    """Crop profile lookup; same failure mapping as predict_yield."""
    return await _generate(
        generator,
        CROP_INFO_PROMPT.format(crop_name=crop_name.strip()),
        CROP_INFO_SYSTEM_PROMPT,
        CropInfo,
        "Failed to fetch crop information from AI model.",
    )
