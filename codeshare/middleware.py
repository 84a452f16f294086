"""
Request logging and deadline middleware.

Every request gets a short request id, a log line with method, path,
status and latency, and a hard deadline of REQUEST_TIMEOUT_SECONDS.

This is a plain ASGI middleware rather than a BaseHTTPMiddleware: the
downstream app runs in the same task, so when the deadline passes the
endpoint coroutine itself is cancelled. The cancellation reaches the
awaited DB call, get_db never reaches its commit, and the session rolls
back on close. The client gets 504 if no response has started yet.

Log format:
    INFO [POST] /account/deduct -> 200 (12ms) req_1a2b3c4d5e6f
"""

import asyncio
import logging
import time
import uuid

from fastapi.responses import JSONResponse
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("codeshare.request")


class RequestLogMiddleware:
    def __init__(self, app: ASGIApp, timeout_seconds: float):
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = f"req_{uuid.uuid4().hex[:12]}"
        scope.setdefault("state", {})["request_id"] = request_id
        method = scope["method"]
        path = scope["path"]
        status_code = None

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message).append("X-Request-ID", request_id)
            await send(message)

        start = time.perf_counter()
        try:
            await asyncio.wait_for(
                self.app(scope, receive, send_with_request_id),
                self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "[%s] %s timed out after %.1fs %s",
                method,
                path,
                self.timeout_seconds,
                request_id,
            )
            if status_code is None:
                response = JSONResponse(
                    status_code=504,
                    content={"detail": "Request timed out", "error_type": "timeout"},
                )
                await response(scope, receive, send_with_request_id)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "[%s] %s -> %s (%.0fms) %s",
                method,
                path,
                status_code if status_code is not None else "-",
                elapsed_ms,
                request_id,
            )
