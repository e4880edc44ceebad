import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.api.deps import (
    get_history_store,
    get_structured_generator,
    get_weather_fetcher,
)
from app.collections.prediction_history import HistoryStore
from app.services.prediction_session import PredictionSession, WeatherFetcher
from app.services.structured_generation import StructuredGenerator

from .actions import BACKGROUND_ACTIONS, actions
from .manager import manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    generator: StructuredGenerator = Depends(get_structured_generator),
    history: HistoryStore = Depends(get_history_store),
    fetch_snapshot: WeatherFetcher = Depends(get_weather_fetcher),
):
    connection = await manager.connect(websocket)
    connection.session = PredictionSession(
        generator=generator,
        history=history,
        weather_fetcher=fetch_snapshot,
        on_change=connection.send_state,
    )
    try:
        while True:
            raw_data = await websocket.receive_text()
            try:
                message = json.loads(raw_data)
            except json.JSONDecodeError:
                await websocket.send_text("Invalid JSON")
                continue

            if not isinstance(message, dict):
                await websocket.send_text("Invalid message")
                continue
            action = message.get("action")
            data = message.get("data")
            if not isinstance(data, dict):
                data = {}
            handler = actions.get(action)
            if handler is None:
                await websocket.send_text(f"Unknown action: {action}")
            elif action in BACKGROUND_ACTIONS:
                connection.spawn(handler(connection, data))
            else:
                await handler(connection, data)
    except WebSocketDisconnect:
        manager.disconnect(connection)
    except Exception:
        logger.exception("WebSocket session %s failed", connection.id)
        manager.disconnect(connection)
