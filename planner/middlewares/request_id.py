"""Correlation ids and one access log line per API call."""

from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
principal_ctx_var: ContextVar[str | None] = ContextVar("principal_id", default=None)
logger = logging.getLogger("planner.request")

# Probes and scrapes are frequent and carry no planning data.
QUIET_PATHS = frozenset({"/health", "/metrics"})


def _log_level(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Reuse or mint ``X-Request-ID`` and log the outcome of each request."""

    def __init__(self, app, header_name: str = "X-Request-ID", quiet_paths=QUIET_PATHS) -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name
        self.quiet_paths = frozenset(quiet_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name, "").strip() or uuid4().hex
        request.state.request_id = request_id
        tokens = (request_id_ctx_var.set(request_id), principal_ctx_var.set(None))
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            if request.url.path not in self.quiet_paths:
                details = {
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": elapsed_ms,
                }
                project_id = request.path_params.get("project_id")
                if project_id:
                    details["project_id"] = project_id
                logger.log(_log_level(response.status_code), "request.completed", extra={"extra_data": details})
        finally:
            request_id_ctx_var.reset(tokens[0])
            principal_ctx_var.reset(tokens[1])
        response.headers[self.header_name] = request_id
        response.headers["X-Response-Time"] = f"{elapsed_ms}ms"
        return response
