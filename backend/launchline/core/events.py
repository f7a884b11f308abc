"""
Application startup and shutdown event handlers.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from launchline.core.analytics import get_analytics_client, shutdown_analytics
from launchline.core.config import settings
from launchline.core.database import close_db, db_manager
from launchline.core.logger import get_logger

logger = get_logger("events")


async def startup_tasks():
    """Tasks to run on application startup."""
    logger.info("Starting application startup tasks")

    if settings.is_development:
        await db_manager.create_tables()

    get_analytics_client()

    logger.info(
        "Application started successfully",
        environment=settings.environment,
        debug=settings.debug,
        database_url=settings.database_url.split("@")[-1],
        redis_url=settings.redis_url.split("@")[-1],
    )


async def shutdown_tasks():
    """Tasks to run on application shutdown."""
    logger.info("Starting application shutdown tasks")

    try:
        shutdown_analytics()
        await close_db()
        logger.info("Application shutdown completed successfully")
    except Exception as e:
        logger.error("Shutdown task failed", error=str(e), exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.
    Handles startup and shutdown events.
    """
    await startup_tasks()

    try:
        yield
    finally:
        await shutdown_tasks()
