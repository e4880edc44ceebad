import logging

from pydantic import ValidationError

from app.models.prediction import PredictionFormData

from .manager import SessionConnection

logger = logging.getLogger(__name__)


async def _send_error(connection: SessionConnection, action: str, message: str) -> None:
    await connection.send({"action": action, "error": {"message": message}})


async def set_location_handler(connection: SessionConnection, data: dict):
    await connection.session.set_location(data.get("location"))


async def predict_handler(connection: SessionConnection, data: dict):
    try:
        form_data = PredictionFormData.model_validate(data.get("formData") or {})
    except ValidationError as e:
        await _send_error(
            connection,
            "predict",
            "Please enter a valid location and cultivation area.",
        )
        logger.info("Rejected prediction form: %s", e.error_count())
        return
    await connection.session.submit_prediction(form_data)


async def reset_handler(connection: SessionConnection, data: dict):
    await connection.session.reset()


async def state_handler(connection: SessionConnection, data: dict):
    await connection.send_state(connection.session.state())


actions = {
    "set_location": set_location_handler,
    "predict": predict_handler,
    "reset": reset_handler,
    "state": state_handler,
}

# Handlers that wait on the network run as tasks so a newer request can overtake them
BACKGROUND_ACTIONS = {"set_location", "predict"}
