"""
Custom middleware for the MakePDF service.

This module contains the request logging middleware.
"""

import time
import uuid
from typing import Any

from loguru import logger


class LoggingMiddleware:
    """
    Request/response logging middleware.

    Logs every HTTP request with a short request ID, the response status and
    the processing time, and echoes the ID back in an ``x-request-id`` header.
    """

    def __init__(self, app: Any) -> None:
        """
        Initialize the logging middleware.

        Args:
            app: ASGI application
        """
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())[:8]
        scope["request_id"] = request_id
        start_time = time.time()
        status_code = 500

        client = scope.get("client")
        logger.info(
            f"[{request_id}] {scope.get('method')} {scope.get('path')} - "
            f"Client: {client[0] if client else 'unknown'}"
        )

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("ascii")))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            process_time = time.time() - start_time
            logger.info(f"[{request_id}] {status_code} in {process_time:.3f}s")
