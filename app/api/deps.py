"""
FastAPI dependencies for the AI generator, weather lookup and history storage.

Tests replace these through ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from app.collections.key_value_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    MongoKeyValueStore,
)
from app.collections.prediction_history import HistoryStore
from app.core.config import settings
from app.services.prediction_session import WeatherFetcher
from app.services.structured_generation import (
    GeminiStructuredGenerator,
    StructuredGenerator,
)
from app.services.weather_service import get_weather_snapshot

_memory_store = InMemoryKeyValueStore()


def get_key_value_store() -> KeyValueStore:
    if settings.HISTORY_STORAGE_BACKEND == "mongo":
        return MongoKeyValueStore()
    return _memory_store


def get_history_store(store: KeyValueStore = Depends(get_key_value_store)) -> HistoryStore:
    return HistoryStore(store)


@lru_cache
def get_structured_generator() -> StructuredGenerator:
    return GeminiStructuredGenerator()


def get_weather_fetcher() -> WeatherFetcher:
    return get_weather_snapshot
