"""FastAPI application entry point."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load .env file before importing settings
load_dotenv()

import structlog  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from . import __description__, __version__  # noqa: E402
from .api.error_handlers import (  # noqa: E402
    application_exception_handler,
    request_validation_exception_handler,
    unexpected_exception_handler,
)
from .api.middleware import (  # noqa: E402
    CorrelationIDMiddleware,
    RequestLoggingMiddleware,
)
from .api.v1.router import router as v1_router  # noqa: E402
from .config.settings import (  # noqa: E402
    ApplicationSettings,
    ConfigurationValidator,
    get_settings,
)
from .core.dependency_container import ServiceContainer  # noqa: E402
from .domain.exceptions import HeritageAIException  # noqa: E402
from .observability.logging.config import setup_logging_from_settings  # noqa: E402

logger = structlog.get_logger()


def create_app(settings: ApplicationSettings | None = None) -> FastAPI:
    """Build the FastAPI application for ``settings``."""
    settings = settings or get_settings()
    setup_logging_from_settings(settings.observability)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        for error in ConfigurationValidator.validate_settings(settings):
            logger.warning("Configuration warning", error=error)

        container = ServiceContainer(settings)
        await container.initialize()
        app.state.container = container
        logger.info(
            "Application started",
            environment=settings.environment.value,
            version=__version__,
        )
        try:
            yield
        finally:
            await container.shutdown()
            logger.info("Application stopped")

    app = FastAPI(
        title=settings.app_name,
        description=__description__,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Add exception handlers
    app.add_exception_handler(
        RequestValidationError, request_validation_exception_handler
    )
    app.add_exception_handler(HeritageAIException, application_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)

    app.include_router(v1_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": settings.app_name,
            "version": __version__,
            "status": "running",
            "docs_url": "/docs",
        }

    return app


app = create_app()


def main() -> None:
    """Main entry point for production deployment."""
    import uvicorn

    settings = get_settings()
    host = os.getenv("HOST", settings.host)
    port = int(os.getenv("PORT", settings.port))

    logger.info("Starting server", host=host, port=port)
    uvicorn.run(
        "heritage_ai.main:app",
        host=host,
        port=port,
        workers=1,
        log_level=settings.observability.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
