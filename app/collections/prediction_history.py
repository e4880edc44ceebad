import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from app.core.config import settings
from app.core.exceptions import PersistenceError
from app.models.prediction import (
    HistoricalPrediction,
    PredictionFormData,
    PredictionResult,
)

from .key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

_history_adapter = TypeAdapter(List[HistoricalPrediction])


class HistoryStore:
    """
    Most-recent-first log of past predictions kept in a single key-value slot.

    Storage failures never propagate: reads degrade to an empty history and
    writes become no-ops, both with a logged warning.
    """

    def __init__(self, store: KeyValueStore, key: Optional[str] = None) -> None:
        self.store = store
        self.key = key or settings.HISTORY_STORAGE_KEY

    async def _read(self) -> List[HistoricalPrediction]:
        raw = await self.store.get(self.key)
        if not raw:
            return []
        return _history_adapter.validate_json(raw)

    async def list(self) -> List[HistoricalPrediction]:
        try:
            return await self._read()
        except (PersistenceError, ValidationError, ValueError) as e:
            logger.warning("Failed to load prediction history from '%s': %s", self.key, e)
            return []

    async def append(
        self, form_data: PredictionFormData, result: PredictionResult
    ) -> HistoricalPrediction:
        history = await self.list()
        entry = HistoricalPrediction(
            id=self._next_id(history),
            date=datetime.now(timezone.utc),
            form_data=form_data,
            result=result,
        )
        updated = [entry, *history]
        try:
            payload = _history_adapter.dump_json(updated, by_alias=True).decode()
            await self.store.set(self.key, payload)
        except PersistenceError as e:
            logger.warning("Failed to save prediction %s to history: %s", entry.id, e)
        return entry

    async def clear(self) -> None:
        try:
            await self.store.remove(self.key)
        except PersistenceError as e:
            logger.warning("Failed to clear prediction history '%s': %s", self.key, e)

    @staticmethod
    def _next_id(history: List[HistoricalPrediction]) -> str:
        candidate = time.time_ns() // 1_000_000
        if history and history[0].id.isdigit():
            candidate = max(candidate, int(history[0].id) + 1)
        return str(candidate)
