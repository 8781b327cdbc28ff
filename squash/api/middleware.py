"""
API Middleware — per-request logging for the scoring API.
"""

from __future__ import annotations

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from squash.config import get_logger

logger = get_logger("squash.api")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with a short id and log its outcome and latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        level = "warning" if response.status_code >= 500 else "info"
        getattr(logger, level)(
            "[%s] %s %s -> %d (%.1fms)",
            request_id, request.method, request.url.path, response.status_code, elapsed_ms,
        )
        response.headers["X-Request-ID"] = request_id
        return response
