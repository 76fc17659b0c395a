"""
System / health / metrics API router.

Handles the root endpoint, health probes and request metrics.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from currentmap import __version__
from api.health import perform_full_health_check, perform_liveness_check, perform_readiness_check
from api.middleware import metrics_collector, get_request_id
from api.state import ApplicationState

router = APIRouter(tags=["System"])

logger = logging.getLogger(__name__)


def _published_state(request: Request) -> Optional[ApplicationState]:
    return getattr(request.app.state, "currentmap", None)


@router.get("/")
async def root():
    """
    API root endpoint.

    Returns basic API information and available endpoint categories.
    """
    return {
        "name": "CURRENTMAP API",
        "version": __version__,
        "status": "operational",
        "docs": "/api/docs",
        "endpoints": {
            "health": "/api/health",
            "metrics": "/api/metrics",
            "currents": "/api/currents",
            "times": "/api/currents/times",
            "info": "/api/currents/info",
        }
    }


@router.get("/api/health")
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Returns:
        - status: Overall health status (healthy/degraded/unhealthy)
        - timestamp: Current UTC timestamp
        - version: API version
        - components: Individual component health status
    """
    result = perform_full_health_check(_published_state(request))
    result["request_id"] = get_request_id()
    return result


@router.get("/api/health/live")
async def liveness_check():
    """Kubernetes liveness probe endpoint."""
    return perform_liveness_check()


@router.get("/api/health/ready")
async def readiness_check(request: Request):
    """
    Kubernetes readiness probe endpoint.

    Returns 503 until the dataset has been published.
    """
    result = perform_readiness_check(_published_state(request))
    if result.get("status") != "ready":
        raise HTTPException(status_code=503, detail="Service not ready")
    return result


@router.get("/api/metrics", response_class=PlainTextResponse)
async def get_metrics():
    """
    Prometheus-compatible metrics endpoint.

    Includes request counts by endpoint and status, request duration
    summaries, error counts and service uptime.
    """
    return metrics_collector.get_prometheus_metrics()


@router.get("/api/metrics/json")
async def get_metrics_json():
    """Metrics endpoint in JSON format."""
    return metrics_collector.get_metrics()
