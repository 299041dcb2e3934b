import os
import logging

import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

from . import config, metrics
from .pipeline.models import PROVIDER_NAMES
from .pipeline.routes import generation_router, prompt_router

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Worker starting up...")
    chains = config.provider_chains()
    logger.info(f"Image chain: {chains['image']} | Video chain: {chains['video']}")
    yield
    logger.info("Worker shutting down...")


app = FastAPI(title="AdGen Worker", lifespan=lifespan)
app.include_router(prompt_router)
app.include_router(generation_router)


@app.get("/health")
def health_check():
    """Verify worker is running and which provider keys are configured."""
    configured = config.credentials_from_env().configured()
    return {
        "status": "ok",
        "credentials": {name: name in configured for name in PROVIDER_NAMES},
        "chains": config.provider_chains(),
    }


@app.get("/metrics")
def metrics_endpoint():
    """Return a snapshot of dispatch metrics."""
    return metrics.get_snapshot()


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    uvicorn.run("adgen.main:app", host="0.0.0.0", port=port, reload=True)
