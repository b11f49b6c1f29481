"""
Request logging middleware.

Sets the correlation ID for the request, optionally bounds the handling
time, and emits one access-log line per request.
"""

import asyncio
import logging
import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from marketing_api.shared.logging import (
    correlation_id_var,
    generate_correlation_id,
    get_logger,
)
from marketing_api.shared.schemas import envelope

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Correlation ID propagation, request timeout and access logging."""

    def __init__(
        self,
        app: Any,
        timeout_seconds: float | None = None,
        logger: logging.Logger | None = None,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.timeout_seconds = timeout_seconds
        self.logger = logger or get_logger(__name__)
        self.exclude_paths = exclude_paths or ["/health", "/ping"]

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER)
            or request.headers.get(REQUEST_ID_HEADER)
            or generate_correlation_id()
        )
        token = correlation_id_var.set(correlation_id)
        start = time.perf_counter()
        try:
            if self.timeout_seconds is None:
                response = await call_next(request)
            else:
                try:
                    response = await asyncio.wait_for(
                        call_next(request), timeout=self.timeout_seconds
                    )
                except asyncio.TimeoutError:
                    self.logger.error(
                        "Request timed out",
                        extra={
                            "method": request.method,
                            "path": request.url.path,
                            "timeout_seconds": self.timeout_seconds,
                        },
                    )
                    response = JSONResponse(
                        status_code=504,
                        content=envelope(error="Request timed out"),
                    )
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            self._log(request, response.status_code, time.perf_counter() - start)
            return response
        finally:
            correlation_id_var.reset(token)

    def _log(self, request: Request, status_code: int, latency: float) -> None:
        if request.url.path in self.exclude_paths:
            return

        fields = {
            "status": status_code,
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query,
            "client_ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "latency_ms": round(latency * 1000, 2),
        }
        if status_code >= 500:
            self.logger.error("Server error", extra=fields)
        elif status_code >= 400:
            self.logger.warning("Client error", extra=fields)
        else:
            self.logger.info("Request completed", extra=fields)
