from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from app.core.config import settings

from .weather import WeatherSnapshot


class AlertCategory(str, Enum):
    FROST = "Frost"
    HEATWAVE = "Heatwave"
    STORM = "Storm"


class WeatherAlert(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: AlertCategory
    message: str


class AlertThresholds(BaseModel):
    """Tunable rules for the alert engine. Boundaries are inclusive."""

    model_config = ConfigDict(frozen=True)

    frost_c: float = 2
    heatwave_c: float = 35
    storm_keywords: tuple[str, ...] = (
        "storm",
        "thunderstorm",
        "hurricane",
        "tornado",
        "heavy rain",
    )

    @classmethod
    def from_settings(cls) -> "AlertThresholds":
        return cls(
            frost_c=settings.FROST_THRESHOLD_C,
            heatwave_c=settings.HEATWAVE_THRESHOLD_C,
            storm_keywords=tuple(settings.STORM_KEYWORDS),
        )


class WeatherReport(BaseModel):
    snapshot: WeatherSnapshot
    alerts: List[WeatherAlert] = Field(default_factory=list)
