"""
Launchline Core - Main Application Entry Point
"""
from fastapi import FastAPI

from launchline.api.router import api_router
from launchline.core.config import settings
from launchline.core.events import lifespan
from launchline.core.exceptions import setup_exception_handlers
from launchline.core.logger import get_logger
from launchline.core.middleware import setup_middleware

logger = get_logger(__name__)


def create_application() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        swagger_ui_parameters={
            "persistAuthorization": True,
        },
    )

    setup_middleware(app)

    setup_exception_handlers(app)

    app.include_router(api_router)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "message": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "api_version": "v1"
        }

    @app.get("/health")
    async def health():
        """Simple health check."""
        return {"status": "healthy"}

    logger.info("FastAPI application created and configured")
    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_config=None,
    )
