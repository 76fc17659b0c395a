"""
Request middleware for the CURRENTMAP API.

Every request gets an ID, one JSON access log line and an entry in the
in-memory metrics. An exception escaping a route becomes a sanitized 500
that carries the request ID.

Stack, outermost first:
    RequestIdMiddleware -> RequestLoggingMiddleware -> MetricsMiddleware
    -> ErrorHandlingMiddleware -> routes
"""
import json
import logging
import time
import uuid
from collections import defaultdict
from contextvars import ContextVar
from typing import Callable, Dict, Optional, Tuple

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from api.state import utc_timestamp

REQUEST_ID_HEADER = "X-Request-ID"

# Probe and scrape endpoints; polled too often to log or count
UNTRACKED_PATHS = frozenset({
    "/api/health",
    "/api/health/live",
    "/api/health/ready",
    "/api/metrics",
    "/api/metrics/json",
})

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return request_id_ctx.get()


class StructuredLogger:
    """Writes one JSON object per log line, tagged with the request ID."""

    def __init__(self, name: str, service: str = "currentmap-api"):
        self.logger = logging.getLogger(name)
        self.service = service

    def _log(self, level: int, message: str, **fields):
        entry = {
            "timestamp": utc_timestamp(),
            "level": logging.getLevelName(level),
            "message": message,
            "service": self.service,
            "request_id": get_request_id(),
            **fields,
        }
        self.logger.log(level, json.dumps({k: v for k, v in entry.items() if v is not None}))

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def error(self, message: str, **fields):
        self._log(logging.ERROR, message, **fields)


access_log = StructuredLogger("currentmap.access")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Binds a request ID for the duration of the request.

    The caller's X-Request-ID is reused when present, otherwise a UUID4 is
    generated. The ID is echoed on every response, error responses included.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_ctx.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log: method, path, query, status and duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in UNTRACKED_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        access_log.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            query=str(request.query_params) or None,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            client_ip=request.client.host if request.client else None,
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Turns unhandled exceptions into a 500 JSON response.

    The full error goes to the log. The client gets the request ID and a
    generic message, or the exception text when debug is on.
    """

    GENERIC_DETAIL = "An internal error occurred. Please contact support with the request ID."

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            access_log.error(
                "Unhandled exception",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error=str(e),
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal Server Error",
                    "detail": str(e) if self.debug else self.GENERIC_DETAIL,
                    "request_id": get_request_id(),
                },
            )


RequestKey = Tuple[str, str, int]  # method, path, status


def _labels(key: RequestKey) -> str:
    method, path, status = key
    return f'method="{method}",path="{path}",status="{status}"'


class MetricsCollector:
    """In-memory request counters, readable as JSON or Prometheus text."""

    def __init__(self):
        self.started = time.monotonic()
        self.counts: Dict[RequestKey, int] = defaultdict(int)
        self.durations: Dict[RequestKey, float] = defaultdict(float)

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self.started

    def record(self, method: str, path: str, status_code: int, duration_seconds: float):
        key = (method, path, status_code)
        self.counts[key] += 1
        self.durations[key] += duration_seconds

    def error_total(self) -> int:
        """Number of recorded 5xx responses."""
        return sum(n for (_, _, status), n in self.counts.items() if status >= 500)

    def get_metrics(self) -> dict:
        return {
            "uptime_seconds": round(self.uptime_seconds, 3),
            "requests": {
                "total": sum(self.counts.values()),
                "by_endpoint": {
                    f"{m} {p} {s}": n for (m, p, s), n in sorted(self.counts.items())
                },
            },
            "latency": {
                "sum_seconds": {
                    f"{m} {p} {s}": round(d, 6) for (m, p, s), d in sorted(self.durations.items())
                },
            },
            "errors": {"total": self.error_total()},
        }

    def get_prometheus_metrics(self) -> str:
        """Metrics in Prometheus text exposition format."""
        lines = [
            "# HELP currentmap_uptime_seconds Time since service start",
            "# TYPE currentmap_uptime_seconds gauge",
            f"currentmap_uptime_seconds {self.uptime_seconds:.3f}",
            "# HELP currentmap_requests_total Requests by method, path and status",
            "# TYPE currentmap_requests_total counter",
        ]
        for key, n in sorted(self.counts.items()):
            lines.append(f"currentmap_requests_total{{{_labels(key)}}} {n}")

        lines.append("# HELP currentmap_request_duration_seconds Request duration")
        lines.append("# TYPE currentmap_request_duration_seconds summary")
        for key, total in sorted(self.durations.items()):
            lines.append(f"currentmap_request_duration_seconds_sum{{{_labels(key)}}} {total:.6f}")
            lines.append(f"currentmap_request_duration_seconds_count{{{_labels(key)}}} {self.counts[key]}")

        lines.append("# HELP currentmap_errors_total 5xx responses")
        lines.append("# TYPE currentmap_errors_total counter")
        lines.append(f"currentmap_errors_total {self.error_total()}")
        return "\n".join(lines) + "\n"


metrics_collector = MetricsCollector()


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records every tracked request in a MetricsCollector."""

    def __init__(self, app, collector: MetricsCollector = metrics_collector):
        super().__init__(app)
        self.collector = collector

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in UNTRACKED_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        self.collector.record(
            request.method,
            request.url.path,
            response.status_code,
            time.perf_counter() - start,
        )
        return response


def setup_middleware(app: FastAPI, debug: bool = False, enable_metrics: bool = True):
    """
    Install the request middleware stack.

    Args:
        app: FastAPI application instance
        debug: Return exception text in 500 responses
        enable_metrics: Record request metrics
    """
    # Last added runs first
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
    if enable_metrics:
        app.add_middleware(MetricsMiddleware, collector=metrics_collector)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
