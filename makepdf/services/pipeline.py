"""
Conversion pipeline for the MakePDF conversion service.

This service sequences one conversion run:
locate engine → stage input → invoke engine → retrieve output,
stopping at the first failure and always tearing the workspace down.
"""

import asyncio
import functools
import threading
import time
import uuid
from pathlib import Path

from loguru import logger

from makepdf.configs.engine import EngineSettings
from makepdf.exceptions import ConversionCancelledError, ConversionError, ErrorTypes
from makepdf.models.conversion import ConversionRequest, ConversionResult, PipelineState
from makepdf.services.invoker import ConversionInvoker
from makepdf.services.locator import BinaryLocator, HostPlatform
from makepdf.services.retriever import OutputRetriever
from makepdf.services.workspace import Workspace


class ConversionPipeline:
    """
    Orchestrates conversion runs.

    A pipeline holds configuration and collaborators only. Each call to
    ``run`` owns its workspace and engine path, so one pipeline can serve
    any number of concurrent runs without locking.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        locator: BinaryLocator | None = None,
        invoker: ConversionInvoker | None = None,
        retriever: OutputRetriever | None = None,
        platform: str | HostPlatform | None = None,
    ):
        """
        Initialize the conversion pipeline.

        Args:
            settings: Engine settings shared by the default collaborators
            locator: Engine binary locator
            invoker: Engine invoker
            retriever: Output retriever
            platform: Host platform override, the running host when None
        """
        self.settings = settings or EngineSettings()
        self.locator = locator or BinaryLocator(self.settings)
        self.invoker = invoker or ConversionInvoker(self.settings)
        self.retriever = retriever or OutputRetriever(settings=self.settings)
        self.platform = platform

    def run(
        self,
        request: ConversionRequest,
        cancel_event: threading.Event | None = None,
    ) -> ConversionResult:
        """
        Execute one conversion run.

        Failures never escape as exceptions: they are logged and returned
        as a failed ConversionResult whose ``error`` names the stage.

        Args:
            request: Document and target format
            cancel_event: Event that aborts the run when set

        Returns:
            ConversionResult in a terminal state
        """
        run_id = uuid.uuid4().hex[:8]
        started = time.monotonic()
        state = PipelineState.IDLE
        engine_path: Path | None = None
        workspace: Workspace | None = None
        error: ConversionError | None = None
        output = b""

        logger.info(f"[{run_id}] Conversion started: {len(request.document)} bytes -> {request.target_format}")

        try:
            state = self._advance(run_id, state, PipelineState.LOCATING_BINARY, cancel_event)
            engine_path = self.locator.locate(self.platform)

            state = self._advance(run_id, state, PipelineState.STAGING_INPUT, cancel_event)
            workspace = Workspace.open(self.settings.temp_root)
            self.invoker.stage_input(workspace, request.document)

            state = self._advance(run_id, state, PipelineState.INVOKING, cancel_event)
            self.invoker.run_engine(engine_path, workspace, request.target_format, cancel_event)

            state = self._advance(run_id, state, PipelineState.RETRIEVING_OUTPUT, cancel_event)
            output = self.retriever.retrieve(workspace, request.target_format)

        except ConversionError as exc:
            exc.stage = exc.stage or state.value
            error = exc
        except Exception as exc:
            logger.exception(f"[{run_id}] Unexpected conversion error: {exc}")
            error = ConversionError(
                f"Unexpected conversion error: {exc}", ErrorTypes.UNKNOWN_ERROR, stage=state.value
            )
            error.__cause__ = exc
        finally:
            # Nothing to tear down when the run failed before the workspace opened
            if workspace is not None:
                workspace.close()

        duration = time.monotonic() - started

        if error is not None:
            logger.error(f"[{run_id}] Conversion failed ({error.error_type}): {error}")
            if error.details:
                logger.debug(f"[{run_id}] Failure details: {error.details}")
            return ConversionResult(
                state=PipelineState.FAILED,
                error=error,
                engine_path=engine_path,
                duration_seconds=duration,
            )

        logger.info(f"[{run_id}] {state.value} -> succeeded: {len(output)} bytes in {duration:.2f}s")
        return ConversionResult(
            state=PipelineState.SUCCEEDED,
            output=output,
            engine_path=engine_path,
            duration_seconds=duration,
        )

    def _advance(
        self,
        run_id: str,
        current: PipelineState,
        target: PipelineState,
        cancel_event: threading.Event | None,
    ) -> PipelineState:
        logger.debug(f"[{run_id}] {current.value} -> {target.value}")
        if cancel_event is not None and cancel_event.is_set():
            error = ConversionCancelledError()
            # Attributed to the stage that was about to start
            error.stage = target.value
            raise error
        return target


def convert(
    document: bytes,
    target_format: str = ".pdf",
    settings: EngineSettings | None = None,
    cancel_event: threading.Event | None = None,
    pipeline: ConversionPipeline | None = None,
) -> bytes:
    """
    Convert a document and return the converted bytes.

    Args:
        document: Raw input bytes
        target_format: Dot-prefixed target format, e.g. ``.pdf``
        settings: Engine settings for a fresh pipeline
        cancel_event: Event that aborts the run when set
        pipeline: Pipeline to use instead of a fresh one

    Returns:
        Converted document bytes

    Raises:
        ConversionError: If the conversion fails at any stage
        ValueError: If the target format is malformed
    """
    pipeline = pipeline or ConversionPipeline(settings)
    request = ConversionRequest(document=document, target_format=target_format)
    return pipeline.run(request, cancel_event).unwrap()


async def convert_async(
    document: bytes,
    target_format: str = ".pdf",
    settings: EngineSettings | None = None,
    pipeline: ConversionPipeline | None = None,
) -> bytes:
    """
    Convert a document without blocking the event loop.

    The run happens in a worker thread. Cancelling the awaiting task kills
    the engine process and waits for workspace teardown before the
    cancellation propagates.

    Raises:
        ConversionError: If the conversion fails at any stage
        asyncio.CancelledError: If the awaiting task is cancelled
    """
    pipeline = pipeline or ConversionPipeline(settings)
    request = ConversionRequest(document=document, target_format=target_format)
    cancel_event = threading.Event()

    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(None, functools.partial(pipeline.run, request, cancel_event))
    try:
        result = await asyncio.shield(future)
    except asyncio.CancelledError:
        cancel_event.set()
        await asyncio.wait([future])
        raise
    return result.unwrap()
