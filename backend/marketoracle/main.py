import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from marketoracle.api.v1.router import api_router
from marketoracle.config import get_database_identity, settings
from marketoracle.database import engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_host, db_name = get_database_identity()
    logger.info(
        "api startup: database_host=%s database_name=%s trigger_configured=%s",
        db_host,
        db_name,
        bool(settings.cron_secret),
    )
    yield
    await engine.dispose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.include_router(api_router, prefix="/api/v1")
