"""Request/response logging middleware with timing and HTTP metrics."""

import time
from typing import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from limit_automation.core.metrics import record_http_request

from .request_context import get_request_id

logger = structlog.get_logger(__name__)


def _endpoint(request: Request) -> str:
    """
    Route template (e.g. /v1/applications/{application_id}) to keep label cardinality low.

    Depending on the FastAPI release, the matched route of an included router
    carries either the full template or only its own part without the
    include prefix. The literal prefix segments the template lacks are
    taken back from the request path, so the label is the same either way.
    """
    route = request.scope.get("route")
    template = getattr(route, "path_format", None)
    if not template:
        return request.url.path

    path_parts = request.url.path.rstrip("/").split("/")
    template_parts = template.rstrip("/").split("/")
    missing = len(path_parts) - len(template_parts)
    if missing <= 0 or ":path}" in template:
        return template
    return "/".join(path_parts[: missing + 1]) + template


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs request start, completion, and duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path

        log = logger.bind(
            request_id=get_request_id(),
            method=method,
            path=path,
        )

        log.info("request_started")

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            record_http_request(method, _endpoint(request), 500, duration)
            log.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(duration * 1000, 2),
            )
            raise

        duration = time.perf_counter() - start_time
        record_http_request(method, _endpoint(request), response.status_code, duration)
        log.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )
        return response
