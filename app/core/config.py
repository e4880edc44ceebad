import os
from typing import List, Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    GEMINI_API_KEY: str = os.environ.get("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = "gemini-2.5-flash"
    OPENWEATHERMAP_API_KEY: str = os.environ.get("OPENWEATHERMAP_API_KEY", "")
    OPENWEATHERMAP_BASE_URL: str = "https://api.openweathermap.org/data/2.5"
    MONGO_URI: str = os.environ.get("MONGO_URI", "")
    MONGO_DIRECT_URI: str = os.environ.get("MONGO_DIRECT_URI", "")
    MONGO_DB_NAME: str = "main"
    HISTORY_STORAGE_BACKEND: Literal["mongo", "memory"] = "memory"
    HISTORY_STORAGE_KEY: str = "agriYieldHistory"
    FORECAST_HORIZON_DAYS: int = 5
    FROST_THRESHOLD_C: float = 2
    HEATWAVE_THRESHOLD_C: float = 35
    STORM_KEYWORDS: List[str] = [
        "storm",
        "thunderstorm",
        "hurricane",
        "tornado",
        "heavy rain",
    ]


settings = Settings()
