"""
Conversion API endpoints for the MakePDF service.

This module accepts an uploaded document, relays it through the conversion
pipeline and streams the converted file back.
"""

import asyncio
import contextlib
import mimetypes
import threading
from functools import lru_cache
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from loguru import logger

from makepdf.config import Settings, get_settings
from makepdf.configs.engine import EngineSettings
from makepdf.exceptions import ErrorTypes
from makepdf.models.response import ConversionErrorResponse, FormatsResponse
from makepdf.services.pipeline import ConversionPipeline
from makepdf.services.relay import FAILURE_NOTICE, AttachmentRelay

router = APIRouter()

# Failures the client cannot fix by sending a different file
_STATUS_BY_ERROR_TYPE = {
    ErrorTypes.UNSUPPORTED_PLATFORM: 503,
    ErrorTypes.BINARY_NOT_FOUND: 503,
    ErrorTypes.WORKSPACE_ERROR: 503,
    ErrorTypes.ENGINE_TIMEOUT: 504,
}


@lru_cache
def get_pipeline() -> ConversionPipeline:
    """
    Shared conversion pipeline.

    Returns:
        ConversionPipeline built from environment engine settings
    """
    return ConversionPipeline(EngineSettings())


def get_conversion_slots(request: Request) -> asyncio.Semaphore:
    """Semaphore capping simultaneous engine processes, created at application startup."""
    return request.app.state.conversion_slots


async def _cancel_on_disconnect(request: Request, cancel_event: threading.Event) -> None:
    """Set the cancel event once the client goes away."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.warning("Client disconnected, cancelling conversion")
            cancel_event.set()
            return
        await asyncio.sleep(0.5)


@router.get("/formats", response_model=FormatsResponse)
async def list_formats(app_settings: Settings = Depends(get_settings)) -> FormatsResponse:
    """
    List accepted extensions.

    Returns:
        FormatsResponse: Allow-list, target format and size limit
    """
    return FormatsResponse(
        allowed_formats=app_settings.allowed_formats,
        target_format=app_settings.TARGET_FORMAT,
        max_file_size=app_settings.MAX_FILE_SIZE,
    )


@router.post("/convert")
async def convert_document(
    request: Request,
    file: UploadFile = File(...),
    target_format: str | None = Form(default=None),
    pipeline: ConversionPipeline = Depends(get_pipeline),
    conversion_slots: asyncio.Semaphore = Depends(get_conversion_slots),
    app_settings: Settings = Depends(get_settings),
) -> Response:
    """
    Convert an uploaded document.

    Args:
        request: Incoming request, watched for client disconnects
        file: Uploaded document
        target_format: Dot-prefixed target format, the configured default when omitted
        pipeline: Conversion pipeline
        conversion_slots: Limit on simultaneous conversions
        app_settings: Application settings

    Returns:
        Response: The converted file, or a JSON failure notice

    Raises:
        HTTPException: If the upload is rejected before conversion
    """
    filename = file.filename or ""
    relay = AttachmentRelay(
        app_settings.allowed_formats,
        pipeline=pipeline,
        target_format=target_format or app_settings.TARGET_FORMAT,
    )

    if not relay.accepts(filename):
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported file type. Allowed: {', '.join(app_settings.allowed_formats)}",
        )

    document = await file.read()
    if not document:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(document) > app_settings.MAX_FILE_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File size exceeds maximum allowed size of {app_settings.MAX_FILE_SIZE} bytes",
        )

    logger.info(f"Converting upload: {filename} ({len(document)} bytes)")

    cancel_event = threading.Event()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, cancel_event))
    try:
        async with conversion_slots:
            outcome = await run_in_threadpool(relay.relay, filename, document, cancel_event)
    except ValueError as exc:
        # Malformed target format
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher

    if not outcome.succeeded:
        error = outcome.error
        error_type = error.error_type if error else ErrorTypes.UNKNOWN_ERROR
        body = ConversionErrorResponse(
            detail=FAILURE_NOTICE,
            error_type=error_type,
            stage=error.stage if error else None,
        )
        return JSONResponse(
            status_code=_STATUS_BY_ERROR_TYPE.get(error_type, 422),
            content=body.model_dump(mode="json"),
        )

    media_type = mimetypes.guess_type(outcome.filename)[0] or "application/octet-stream"
    return Response(
        content=outcome.data,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename*=utf-8''{quote(outcome.filename)}"},
    )
