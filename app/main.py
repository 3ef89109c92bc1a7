from fastapi import FastAPI

from app import models  # noqa: F401  (registers Users / Weight_Log tables)
from app.core.config import settings
from app.core.db import engine
from app.core.logging_config import configure_logging
from app.core.store import init_store
from app.api.v1.health import router as health_router
from app.api.v1.gateway import router as gateway_router
from app.api.v1.stats import router as stats_router

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Weight Tracker", version="1.0.0")

if engine:
    init_store(engine)

app.include_router(health_router, prefix="/v1")
app.include_router(gateway_router, prefix="/v1")
app.include_router(stats_router, prefix="/v1")
