"""
Health checks for the CURRENTMAP API.

Designed for Kubernetes liveness/readiness probes and load balancer health
checks. The only dependency is the in-memory dataset built at startup.
"""
import logging
from typing import Dict, Any, Optional
from enum import Enum
from dataclasses import dataclass

from currentmap import __version__
from api.state import ApplicationState, utc_timestamp

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    """Health check status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""
    name: str
    status: HealthStatus
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


def check_dataset_health(app_state: Optional[ApplicationState]) -> ComponentHealth:
    """
    Check that the current dataset is loaded and has data.

    An empty dataset (no surviving features at any time step) is reported as
    degraded: queries still work but always return nothing.
    """
    if app_state is None:
        return ComponentHealth(
            name="dataset",
            status=HealthStatus.UNHEALTHY,
            message="Dataset not loaded",
        )

    summary = app_state.dataset.summary()
    total = summary["features_per_time"]["total"]

    return ComponentHealth(
        name="dataset",
        status=HealthStatus.HEALTHY if total > 0 else HealthStatus.DEGRADED,
        message=f"{summary['num_times']} time steps, {summary['num_points']} points",
        details={
            "source": summary["source"],
            "total_features": total,
        },
    )


def perform_full_health_check(app_state: Optional[ApplicationState]) -> Dict[str, Any]:
    """
    Perform health check of all components.

    Returns:
        Dict with overall status and component details
    """
    components = [check_dataset_health(app_state)]

    if any(c.status == HealthStatus.UNHEALTHY for c in components):
        overall_status = HealthStatus.UNHEALTHY
    elif any(c.status == HealthStatus.DEGRADED for c in components):
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.HEALTHY

    result = {
        "status": overall_status.value,
        "timestamp": utc_timestamp(),
        "version": __version__,
        "components": {
            c.name: {
                "status": c.status.value,
                "message": c.message,
                **({"details": c.details} if c.details else {}),
            }
            for c in components
        },
    }
    if app_state is not None:
        result["uptime_seconds"] = round(app_state.uptime_seconds, 2)
    return result


def perform_liveness_check() -> Dict[str, Any]:
    """Liveness probe: the process is up and serving."""
    return {
        "status": "alive",
        "timestamp": utc_timestamp(),
    }


def perform_readiness_check(app_state: Optional[ApplicationState]) -> Dict[str, Any]:
    """Readiness probe: the dataset has been published."""
    is_ready = app_state is not None
    return {
        "status": "ready" if is_ready else "not_ready",
        "timestamp": utc_timestamp(),
        "dataset": "loaded" if is_ready else "missing",
    }
