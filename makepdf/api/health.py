"""
Health check endpoints for the MakePDF service.

This module provides health check endpoints for monitoring
and service discovery.
"""

import platform
import sys
from datetime import datetime

import psutil
from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from loguru import logger

from makepdf.config import settings
from makepdf.configs.engine import EngineSettings
from makepdf.exceptions import ConversionError
from makepdf.services.locator import BinaryLocator
from makepdf.services.workspace import Workspace
from makepdf.utils.shell import get_command_version

router = APIRouter()

LAST_RESTART = datetime.utcnow()


def check_engine() -> dict[str, str | bool | None]:
    """
    Locate the conversion engine.

    Returns:
        dict: Whether the engine was found, its path, and the lookup error if any
    """
    try:
        engine_path = BinaryLocator(EngineSettings()).locate()
    except ConversionError as exc:
        return {"available": False, "path": None, "error": str(exc)}
    return {"available": True, "path": str(engine_path), "error": None}


def read_engine_version(engine_path: str) -> str | None:
    """Ask the engine for its version, using a throwaway profile like a real run."""
    try:
        with Workspace.open(EngineSettings().temp_root) as workspace:
            profile = f"-env:UserInstallation={workspace.profile_dir.as_uri()}"
            return get_command_version(engine_path, args=[profile])
    except ConversionError as exc:
        logger.warning(f"Could not prepare a profile for the version check: {exc}")
        return None


@router.get("/healthz")
async def health_check() -> JSONResponse:
    """
    Basic health check endpoint.

    Returns:
        JSONResponse: Health status and basic information
    """
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


@router.get("/health")
async def detailed_health_check() -> JSONResponse:
    """
    Detailed health check endpoint with system and engine information.

    Returns:
        JSONResponse: Detailed health status and system metrics
    """
    try:
        system_info = {
            "platform": sys.platform,
            "platform_version": platform.version(),
            "python_version": platform.python_version(),
        }

        system_metrics = {
            "cpu_percent": psutil.cpu_percent(interval=None),
            "memory_percent": psutil.virtual_memory().percent,
            "disk_percent": psutil.disk_usage("/").percent,
        }

        engine = check_engine()
        if engine["available"]:
            engine["version"] = await run_in_threadpool(read_engine_version, str(engine["path"]))

        return JSONResponse(
            status_code=200,
            content={
                "status": "healthy" if engine["available"] else "degraded",
                "service": settings.APP_NAME,
                "version": settings.VERSION,
                "environment": settings.ENVIRONMENT,
                "timestamp": datetime.utcnow().isoformat(),
                "last_restart": LAST_RESTART.isoformat(),
                "system": system_info,
                "metrics": system_metrics,
                "engine": engine,
            },
        )
    except (OSError, RuntimeError) as e:
        logger.error(f"Detailed health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unhealthy")


@router.get("/ready")
async def readiness_check() -> JSONResponse:
    """
    Readiness check endpoint for container health checks.

    Returns:
        JSONResponse: 200 when the conversion engine is installed, 503 otherwise
    """
    engine = check_engine()
    if engine["available"]:
        return JSONResponse(
            status_code=200,
            content={
                "status": "ready",
                "service": settings.APP_NAME,
                "engine": engine["path"],
                "timestamp": datetime.utcnow().isoformat(),
            },
        )
    return JSONResponse(
        status_code=503,
        content={
            "status": "not_ready",
            "service": settings.APP_NAME,
            "missing_dependencies": ["soffice"],
            "error": engine["error"],
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
