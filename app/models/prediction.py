from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .weather import WeatherSnapshot


class CamelModel(BaseModel):
    """Serialized with camelCase keys, accepts either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PredictionFormData(CamelModel):
    crop_type: str = Field(min_length=1, description="e.g. 'Wheat'")
    location: str = Field(
        description="Place name or 'Lat: 12.3456, Lng: 78.9012' from a drawn field"
    )
    soil_type: str = Field(min_length=1, description="e.g. 'Loamy'")
    rainfall: float = Field(ge=0, description="Annual rainfall in mm")
    temperature: float = Field(description="Average temperature in °C")
    pesticide_usage: bool
    fertilizer_type: str = Field(min_length=1, description="e.g. 'Organic'")
    area: float = Field(gt=0, description="Cultivation area in hectares")

    @field_validator("crop_type", "location", "soil_type", "fertilizer_type")
    @classmethod
    def _strip_and_require(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class RecommendationImpact(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Recommendation(CamelModel):
    title: str
    description: str
    impact: RecommendationImpact
    potential_yield_increase: float = Field(
        ge=0, description="Estimated percentage increase in yield."
    )


class PredictionResult(CamelModel):
    predicted_yield: float = Field(description="Predicted yield in tons per hectare.")
    yield_unit: str = Field(
        description="Unit of measurement for the yield, e.g., 'tons/hectare'."
    )
    confidence_score: float = Field(
        ge=0, le=1, description="A score from 0.0 to 1.0 indicating model confidence."
    )
    summary: str = Field(
        description="A brief, human-readable summary of the prediction."
    )
    weather_impact_analysis: str = Field(
        description="A detailed analysis of how the provided weather forecast might impact the crop yield."
    )
    recommendations: List[Recommendation]
    risk_factors: List[str] = Field(
        description="Potential risks that could affect the yield."
    )


class PredictionRequest(CamelModel):
    form_data: PredictionFormData
    weather: Optional[WeatherSnapshot] = None
    include_forecast: bool = Field(
        default=False,
        description="Fetch the forecast for form_data.location when weather is not given.",
    )


class HistoricalPrediction(CamelModel):
    id: str
    date: datetime
    form_data: PredictionFormData
    result: PredictionResult


# --- Analytics Models ---


class YieldPoint(CamelModel):
    label: str
    predicted_yield: float
    yield_unit: str


class CropCount(CamelModel):
    crop_type: str
    count: int


class LocationMarker(CamelModel):
    lat: float
    lon: float
    crop_type: str
    predicted_yield: float
    yield_unit: str


class HistoryAnalytics(CamelModel):
    total_predictions: int = 0
    yield_series: List[YieldPoint] = Field(default_factory=list)
    crop_distribution: List[CropCount] = Field(default_factory=list)
    locations: List[LocationMarker] = Field(default_factory=list)
