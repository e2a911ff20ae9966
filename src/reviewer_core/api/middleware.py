"""HTTP middleware: request logging and the overall request deadline."""
import asyncio
import logging
import time
from typing import Awaitable, Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from .. import schemas
from ..errors import ErrorCode

logger = logging.getLogger("reviewer-core.http")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f} ms)"
        )
        return response


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """
    Bound every request by an overall deadline.

    On expiry the client gets a 500 INTERNAL "request timeout". Work already
    running in the threadpool is not interrupted: its transaction still
    commits or rolls back on its own.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                f"{request.method} {request.url.path} exceeded {self.timeout_seconds}s deadline"
            )
            body = schemas.ErrorBody(
                error=schemas.ErrorItem(code=ErrorCode.INTERNAL.value, message="request timeout")
            )
            return JSONResponse(status_code=500, content=body.model_dump())
