"""
HTTP middleware: request tracing, access logging and Prometheus metrics.

Both middlewares label requests by route template
(/api/v1/services/{service_id}) rather than the raw path, so service ids
and codes do not end up as metric labels.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from rentevent.core.logging_config import get_logger, set_trace_id, clear_trace_id
from rentevent.core.metrics import (
    errors_total,
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)


logger = get_logger(__name__)

TRACE_HEADERS = ("X-Trace-ID", "X-Correlation-ID")
UNMATCHED_ROUTE = "unmatched"


def route_template(request: Request) -> str:
    """Path template of the matched route; only known after routing."""
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


def incoming_trace_id(request: Request) -> str:
    for header in TRACE_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return str(uuid.uuid4())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Binds a trace ID to the request and logs its start and outcome.

    The client's X-Trace-ID (or X-Correlation-ID) is reused when present and
    returned in both headers. Requests slower than slow_request_threshold_ms
    complete with a warning instead of an info record.
    """

    def __init__(self, app: ASGIApp, slow_request_threshold_ms: float = 1000.0):
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        trace_id = incoming_trace_id(request)
        set_trace_id(trace_id)
        started = time.perf_counter()

        logger.debug(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else "unknown",
            user_agent=request.headers.get("user-agent", "unknown"),
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                route=route_template(request),
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                error_type=type(exc).__name__,
                error_message=str(exc),
                exc_info=True,
            )
            raise
        finally:
            clear_trace_id()

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        slow = duration_ms > self.slow_request_threshold_ms
        log = logger.warning if slow else logger.info
        log(
            "request_completed",
            method=request.method,
            path=request.url.path,
            route=route_template(request),
            status_code=response.status_code,
            duration_ms=duration_ms,
            slow=slow,
            trace_id=trace_id,
        )

        for header in TRACE_HEADERS:
            response.headers[header] = trace_id
        return response


class PrometheusMiddleware(BaseHTTPMiddleware):
    """HTTP request counts, durations, in-flight gauge and unhandled errors."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # The scrape endpoint is not counted
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        in_progress = http_requests_in_progress.labels(method=method)
        in_progress.inc()
        started = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as exc:
            errors_total.labels(error_type=type(exc).__name__, endpoint=route_template(request)).inc()
            raise
        finally:
            in_progress.dec()
            endpoint = route_template(request)
            http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                time.perf_counter() - started
            )
