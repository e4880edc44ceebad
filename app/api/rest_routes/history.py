from typing import List

from fastapi import APIRouter, Depends, status

from app.api.deps import get_history_store
from app.collections.prediction_history import HistoryStore
from app.models.prediction import HistoricalPrediction, HistoryAnalytics
from app.services.history_analytics import summarize_history

router = APIRouter(prefix="/history", tags=["History"])


@router.get("", response_model=List[HistoricalPrediction])
async def list_history(
    history: HistoryStore = Depends(get_history_store),
) -> List[HistoricalPrediction]:
    """
    Past predictions, most recent first.
    """
    return await history.list()


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(history: HistoryStore = Depends(get_history_store)) -> None:
    await history.clear()


@router.get("/analytics", response_model=HistoryAnalytics)
async def get_history_analytics(
    history: HistoryStore = Depends(get_history_store),
) -> HistoryAnalytics:
    return summarize_history(await history.list())
