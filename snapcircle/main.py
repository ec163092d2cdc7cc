"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from snapcircle.api.errors import register_exception_handlers
from snapcircle.api.health import router as health_router
from snapcircle.config import settings
from snapcircle.core.logging import get_logger, setup_logging
from snapcircle.db.database import engine as db_engine
from snapcircle.db.models import Base
from snapcircle.services.storage import get_blob_storage

setup_logging(settings.LOG_LEVEL, sql_echo=settings.DEBUG)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    # BlobStorage 초기화
    storage = get_blob_storage()
    app.state.blob_storage = storage
    logger.info(f"Blob storage initialized: {storage.name}")

    yield

    logger.info("Shutting down...")
    db_engine.dispose()


app = FastAPI(title="SnapCircle", lifespan=lifespan)

register_exception_handlers(app)
app.include_router(health_router)
