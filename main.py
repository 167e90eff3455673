# ===== Part 1: Imports & Logging ============================================
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from modules.safety_inspections import config, register_api
from modules.safety_inspections.api import close_container
from modules.safety_inspections.seed import DEMO_USER_ID, DEMO_USER_NAME
from utils.state import AppState

logger = logging.getLogger(__name__)
logging.basicConfig(
    level=getattr(logging, config.log_level(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)


# ===== Part 2: Application factory ==========================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_container()
    logger.info("SafetyHub services closed")


def create_app() -> FastAPI:
    AppState.set_active_user(
        os.environ.get("SAFETYHUB_USER_ID", DEMO_USER_ID),
        os.environ.get("SAFETYHUB_USER_NAME", DEMO_USER_NAME),
    )
    app = FastAPI(title="Factory SafetyHub", lifespan=lifespan)
    register_api(app)
    logger.info("SafetyHub data directory: %s", config.data_dir().resolve())
    return app


app = create_app()


# ===== Part 3: Entry point ==================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.environ.get("SAFETYHUB_HOST", "127.0.0.1"),
        port=int(os.environ.get("SAFETYHUB_PORT", "8000")),
    )
