"""
FastAPI application entry point for the MakePDF service.

This module initializes the FastAPI application with configuration,
middleware, logging and routing for the document conversion service.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from loguru import logger

from makepdf.api import conversion, health
from makepdf.config import settings
from makepdf.middleware import LoggingMiddleware


def validate_engine() -> None:
    """
    Check that the conversion engine is installed.

    Raises:
        RuntimeError: If the engine is missing in production
    """
    engine = health.check_engine()
    if engine["available"]:
        logger.info(f"Conversion engine found: {engine['path']}")
        return

    if settings.ENVIRONMENT == "production":
        raise RuntimeError(f"Conversion engine not found in production: {engine['error']}")
    logger.warning(f"Conversion engine not found (non-fatal in {settings.ENVIRONMENT}): {engine['error']}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown events.
    """
    logger.info(f"{settings.APP_NAME} v{settings.VERSION} (re)started")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Accepted formats: {', '.join(settings.allowed_formats)}")

    try:
        validate_engine()
    except RuntimeError as exc:
        logger.error(f"Engine validation failed: {exc}")
        raise

    # Bound to the serving event loop, sized from the current settings
    app.state.conversion_slots = asyncio.Semaphore(settings.MAX_CONCURRENT_CONVERSIONS)
    logger.info(f"Conversion slots: {settings.MAX_CONCURRENT_CONVERSIONS}")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Converts office documents to PDF with a headless LibreOffice engine",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    setup_middleware(app)
    setup_routers(app)
    setup_logging()

    return app


def setup_middleware(app: FastAPI) -> None:
    """
    Configure middleware for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)
    app.add_middleware(LoggingMiddleware)  # type: ignore


def setup_routers(app: FastAPI) -> None:
    """
    Include API routers in the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(conversion.router, prefix="/api/v1", tags=["conversion"])


def setup_logging() -> None:
    """
    Configure logging with loguru.
    """
    logger.remove()  # Remove default handler

    logger.add(
        sink=lambda msg: print(msg, end=""),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=settings.LOG_LEVEL,
        colorize=True,
    )

    if settings.ENVIRONMENT == "production":
        Path("logs").mkdir(exist_ok=True)
        logger.add(
            "logs/app.log",
            rotation="1 day",
            retention="30 days",
            level=settings.LOG_LEVEL,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "makepdf.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
