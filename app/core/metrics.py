"""Prometheus metrics: HTTP traffic and analytics runs."""

import re
import time

from prometheus_client import Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

APP_INFO = Info("faculty_analytics", "Faculty evaluation analytics build info")
APP_INFO.info({"version": "1.0.0"})

# --- HTTP ---

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10],
)

# --- Analytics engine ---

ANALYTICS_RUNS = Counter(
    "analytics_runs_total",
    "Professor analytics runs by outcome",
    ["outcome"],  # success / invalid_filter / input_not_found
)

ANALYTICS_DURATION = Histogram(
    "analytics_run_duration_seconds",
    "Professor analytics run duration in seconds (fetch + compute)",
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5],
)

ANALYTICS_EVALUATIONS = Histogram(
    "analytics_evaluations_per_run",
    "Deduplicated evaluations analyzed per successful run",
    buckets=[0, 1, 5, 10, 25, 50, 100, 250, 1000],
)


def observe_analytics_run(outcome: str, seconds: float, evaluations: int | None = None) -> None:
    ANALYTICS_RUNS.labels(outcome=outcome).inc()
    ANALYTICS_DURATION.observe(seconds)
    if evaluations is not None:
        ANALYTICS_EVALUATIONS.observe(evaluations)


# --- Middleware ---

_UNTRACKED_PATHS = frozenset({"/metrics", "/api/v1/health"})
_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


def _normalize_path(path: str) -> str:
    """Collapse numeric path segments (evaluatee ids) into ``{id}``."""
    return _NUMERIC_SEGMENT.sub("/{id}", path)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Count and time every request except scrapes and health checks."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in _UNTRACKED_PATHS:
            return await call_next(request)

        method = request.method
        path = _normalize_path(request.url.path)

        start = time.perf_counter()
        response = await call_next(request)
        REQUEST_DURATION.labels(method=method, path=path).observe(time.perf_counter() - start)
        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        return response


def metrics_response() -> Response:
    return Response(content=generate_latest(), media_type="text/plain; version=0.0.4; charset=utf-8")
