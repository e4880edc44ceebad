import asyncio
import json
import logging
from typing import Dict, Set
from uuid import uuid4

from fastapi import WebSocket

from app.services.prediction_session import PredictionSession, SessionState

logger = logging.getLogger(__name__)


class SessionConnection:
    """A socket, its prediction session and the action tasks it has spawned."""

    def __init__(self, websocket: WebSocket) -> None:
        self.id = uuid4().hex
        self.websocket = websocket
        self.session: PredictionSession | None = None
        self.tasks: Set[asyncio.Task] = set()

    def spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self.tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self.tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Action task failed for connection %s", self.id, exc_info=exc
            )

    async def send(self, message: dict) -> None:
        await self.websocket.send_text(json.dumps(message, default=str))

    async def send_state(self, state: SessionState) -> None:
        await self.send(
            {"action": "state", "data": state.model_dump(mode="json", by_alias=True)}
        )


class ConnectionManager:
    def __init__(self) -> None:
        self.active_connections: Dict[str, SessionConnection] = {}

    async def connect(self, websocket: WebSocket) -> SessionConnection:
        await websocket.accept()
        connection = SessionConnection(websocket)
        self.active_connections[connection.id] = connection
        return connection

    def disconnect(self, connection: SessionConnection) -> None:
        for task in list(connection.tasks):
            task.cancel()
        self.active_connections.pop(connection.id, None)


manager = ConnectionManager()
