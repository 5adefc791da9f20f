"""
Prometheus Metrics for the Workspace Membership Service

Counters for invitation outcomes and seat synchronisation, plus the HTTP and
external API metrics shared by every pod. Each pod keeps its own registry and
is scraped independently.
"""

import logging
import re
import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# =============================================================================
# HTTP Request Metrics
# =============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
)

# =============================================================================
# External API Metrics
# =============================================================================

external_api_requests_total = Counter(
    "external_api_requests_total",
    "Total requests to external services",
    ["service"],
)

external_api_errors_total = Counter(
    "external_api_errors_total",
    "Total failed requests to external services",
    ["service"],
)

external_api_duration_seconds = Histogram(
    "external_api_duration_seconds",
    "External service request duration in seconds",
    ["service"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# =============================================================================
# Membership Metrics
# =============================================================================

membership_invitations_total = Counter(
    "membership_invitations_total",
    "Email invitations by outcome",
    ["outcome"],
)

membership_invite_links_total = Counter(
    "membership_invite_links_total",
    "Invite link lifecycle events",
    ["event"],
)

membership_seat_sync_total = Counter(
    "membership_seat_sync_total",
    "Seat adjustments sent to the billing provider",
    ["direction", "outcome"],
)

membership_removals_total = Counter(
    "membership_removals_total",
    "Members removed from workspaces",
)

# =============================================================================
# System Metrics
# =============================================================================

uptime_seconds = Gauge(
    "uptime_seconds",
    "Application uptime in seconds",
)

startup_time = time.time()


def update_uptime():
    """Update the uptime metric."""
    uptime_seconds.set(time.time() - startup_time)


async def metrics_endpoint(request: Request) -> Response:
    """
    Prometheus metrics endpoint.

    Meant for in-cluster scraping only, not for exposure through the Ingress.
    """
    update_uptime()
    metrics_output = generate_latest(REGISTRY)
    return Response(content=metrics_output, media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to automatically collect HTTP request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        endpoint = normalize_path(request.url.path)

        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.time()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
        except Exception as e:
            logger.error(f"Error in PrometheusMiddleware: {e}")
            raise
        finally:
            duration = time.time() - start_time
            http_request_duration_seconds.labels(
                method=method, endpoint=endpoint
            ).observe(duration)
            http_requests_total.labels(
                method=method, endpoint=endpoint, status=status
            ).inc()
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()

        return response


def normalize_path(path: str) -> str:
    """
    Normalize URL paths to prevent cardinality explosion.

    Workspace/member public ids and invite codes are 12-character tokens,
    internal ids are UUIDs. Both collapse to ``{id}``.
    Examples:
      /api/v1/workspaces/k3J9aQ2mXz1b/members -> /api/v1/workspaces/{id}/members
      /api/v1/invite-links/550e8400-e29b-41d4-a716-446655440000 -> /api/v1/invite-links/{id}
    """
    path = re.sub(
        r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
        "/{id}",
        path,
        flags=re.IGNORECASE,
    )
    path = re.sub(r"/(workspaces|members|invites)/[A-Za-z0-9_-]{12,}", r"/\1/{id}", path)
    path = re.sub(r"/\d+", "/{id}", path)
    return path
