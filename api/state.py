"""
Application state for the CURRENTMAP API.

The state is built once during startup and never changes afterwards. It is
published as a single reference on ``app.state`` so request handlers either
see the fully built dataset or, before startup completes, nothing at all.
No locking is needed because there are no writers after construction.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, Request

from currentmap.store import CurrentDataset, build_dataset

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True, eq=False)
class ApplicationState:
    """Immutable container for everything request handlers read."""
    dataset: CurrentDataset
    startup_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def uptime_seconds(self) -> float:
        """Get application uptime in seconds."""
        return (datetime.now(timezone.utc) - self.startup_time).total_seconds()


def load_app_state(settings) -> ApplicationState:
    """
    Build the application state from settings.

    Runs the full dataset pipeline synchronously. Any load error propagates
    so the service never starts without a dataset.
    """
    logger.info(f"Building current dataset from {settings.dataset_path}")
    dataset = build_dataset(
        settings.dataset_path,
        names=settings.variable_names,
        layer_dim=settings.layer_dim,
        layer_index=settings.layer_index,
    )
    return ApplicationState(dataset=dataset)


def get_app_state(request: Request) -> ApplicationState:
    """
    FastAPI dependency returning the published application state.

    Raises:
        HTTPException: 503 if startup has not published a state yet
    """
    app_state: Optional[ApplicationState] = getattr(request.app.state, "currentmap", None)
    if app_state is None:
        raise HTTPException(status_code=503, detail="Dataset not loaded")
    return app_state


def get_dataset(request: Request) -> CurrentDataset:
    """FastAPI dependency returning the immutable current dataset."""
    return get_app_state(request).dataset
