from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from app.api.rest_routes.crops import router as crops_router  # noqa: E402
from app.api.rest_routes.history import router as history_router  # noqa: E402
from app.api.rest_routes.predictions import router as predictions_router  # noqa: E402
from app.api.rest_routes.weather import router as weather_router  # noqa: E402
from app.api.websocket.endpoints import router as websocket_router  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.core.mongodb import close_mongo_client, init_mongo_client  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.HISTORY_STORAGE_BACKEND == "mongo":
        await init_mongo_client()
    yield
    await close_mongo_client()


app = FastAPI(title="AgriYield AI", lifespan=lifespan)

app.include_router(websocket_router, tags=["websocket"])
app.include_router(weather_router)
app.include_router(predictions_router)
app.include_router(crops_router)
app.include_router(history_router)


@app.get("/")
async def root():
    return {"message": "Welcome to AgriYield AI!"}
