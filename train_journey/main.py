import logging

from fastapi import FastAPI

from train_journey.api.routes import router
from train_journey.infra.settings import get_log_level, load_env_file, validate_settings

load_env_file()
validate_settings()

app = FastAPI(title="train-journey", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "train-journey", "version": "0.1.0"}
