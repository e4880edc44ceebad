from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# --- Provider (OpenWeatherMap 5-day / 3-hour) Models ---


class WeatherCondition(BaseModel):
    """Describes the weather condition (e.g., 'light rain', icon '10d')."""

    id: Optional[int] = None
    main: Optional[str] = None
    description: str
    icon: str


class SampleMain(BaseModel):
    """Instantaneous temperature of a forecast sample, in °C."""

    temp: float = Field(allow_inf_nan=False)


class ForecastSample(BaseModel):
    """A single time-stamped forecast sample."""

    dt: datetime
    main: SampleMain
    weather: List[WeatherCondition] = Field(min_length=1)
    dt_txt: Optional[str] = None

    @property
    def condition(self) -> WeatherCondition:
        return self.weather[0]


class City(BaseModel):
    """Location metadata returned alongside the forecast."""

    id: Optional[int] = None
    name: Optional[str] = None
    country: Optional[str] = None
    timezone: int = Field(default=0, description="Shift in seconds from UTC")


class ForecastResponse(BaseModel):
    """Envelope of the forecast endpoint. Samples stay raw for the normalizer."""

    cod: str
    message: Optional[str | int] = None
    list: List[dict] = Field(default_factory=list)
    city: Optional[City] = None

    @model_validator(mode="before")
    @classmethod
    def _stringify_cod(cls, values):
        if isinstance(values, dict) and "cod" in values:
            values = dict(values)
            values["cod"] = str(values["cod"])
        return values


# --- Normalized Models ---


class ForecastDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str = Field(description="Calendar-day label, e.g. 'Mon, Oct 19'")
    temp_max: float
    temp_min: float
    description: str
    icon: str

    @model_validator(mode="after")
    def _check_temperature_order(self):
        if self.temp_min > self.temp_max:
            raise ValueError("temp_min must not exceed temp_max")
        return self


class CurrentConditions(BaseModel):
    model_config = ConfigDict(frozen=True)

    temp: float
    description: str
    icon: str


class WeatherSnapshot(BaseModel):
    """Current conditions plus the per-day forecast horizon."""

    model_config = ConfigDict(frozen=True)

    current: CurrentConditions
    forecast: List[ForecastDay]


# --- Location Models ---


class WeatherLocation(BaseModel):
    """Either a coordinate pair or a free-text place name."""

    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)
    query: Optional[str] = None

    @model_validator(mode="after")
    def _check_one_form(self):
        has_coords = self.lat is not None and self.lon is not None
        has_query = bool(self.query and self.query.strip())
        if has_coords == has_query:
            raise ValueError("Provide either lat/lon or a place name")
        return self

    @property
    def is_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_query_params(self) -> dict:
        if self.is_coordinates:
            return {"lat": self.lat, "lon": self.lon}
        return {"q": self.query.strip()}
