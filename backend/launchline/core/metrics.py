"""
Prometheus metrics for HTTP traffic, invitations and the event outbox.
"""
import time

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

# Request metrics
request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code']
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

active_requests = Gauge(
    'http_requests_active',
    'Number of active HTTP requests'
)

# Authentication metrics
token_validations = Counter(
    'token_validations_total',
    'Total token validations',
    ['status']
)

# Workspace metrics
workspace_invitations = Counter(
    'workspace_invitations_total',
    'Workspace invitation lifecycle operations',
    ['outcome']
)

# Outbox metrics
outbox_events = Counter(
    'outbox_events_total',
    'Outbox events processed by the dispatcher',
    ['status']
)

outbox_dispatch_duration = Histogram(
    'outbox_dispatch_duration_seconds',
    'Duration of an outbox dispatch batch in seconds'
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        active_requests.inc()
        start_time = time.time()
        endpoint = self._get_endpoint_name(request)
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            request_count.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.time() - start_time)
            active_requests.dec()

    def _get_endpoint_name(self, request: Request) -> str:
        """Use the matched route template so tokens and ids don't explode label cardinality."""
        route = request.scope.get("route")
        path_format = getattr(route, "path_format", None)
        if path_format:
            return path_format

        path = request.url.path
        if path.startswith("/api/v1/"):
            parts = path.split("/")
            normalized_parts = []
            for i, part in enumerate(parts):
                if i >= 4 and part and not part.isalpha():
                    normalized_parts.append("{id}")
                else:
                    normalized_parts.append(part)
            return "/".join(normalized_parts)

        return path


def record_token_validation(success: bool = True):
    """Record token validation metrics."""
    status = "success" if success else "failure"
    token_validations.labels(status=status).inc()


def record_invitation(outcome: str):
    """Record an invitation lifecycle outcome (created, redeemed, disabled, rejected)."""
    workspace_invitations.labels(outcome=outcome).inc()


def record_outbox_event(status: str, count: int = 1):
    """Record outbox dispatch results (dispatched, failed)."""
    if count > 0:
        outbox_events.labels(status=status).inc(count)


def get_metrics() -> bytes:
    """Get Prometheus metrics in text format."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get Prometheus metrics content type."""
    return CONTENT_TYPE_LATEST
