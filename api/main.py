"""
FastAPI backend for the CURRENTMAP ocean current server.

Provides REST API endpoints for:
- Ocean current GeoJSON for a time and bounding box
- Dataset time axis and summary
- Health probes and request metrics

The dataset is built once, synchronously, while the application starts. If
it cannot be built the application does not start.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from currentmap import __version__
from api.config import Settings, settings as default_settings
from api.middleware import setup_middleware
from api.routers import currents, system
from api.state import ApplicationState, load_app_state

logging.basicConfig(
    level=getattr(logging, default_settings.log_level.upper(), logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    app_state: Optional[ApplicationState] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Application factory for the CURRENTMAP API.

    Args:
        app_state: Prebuilt state to serve. When omitted the dataset is built
            from ``settings.dataset_path`` during startup.
        settings: Settings to use (default: environment settings)

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        state = app_state
        if state is None:
            # Load errors propagate here and abort startup
            state = load_app_state(settings)
        application.state.currentmap = state
        logger.info("Current dataset published, accepting queries")
        yield
        application.state.currentmap = None

    application = FastAPI(
        title="CURRENTMAP API",
        description="""
## Ocean Current Map API

Serves a single ocean current dataset as GeoJSON for map rendering.

### Features
- Speed (knots) and direction (degrees from north) per grid point
- Nearest-earlier time step resolution
- Inclusive bounding box filtering
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    setup_middleware(
        application,
        debug=settings.is_development,
        enable_metrics=settings.metrics_enabled,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})

    application.include_router(system.router)
    application.include_router(currents.router)

    return application


# ============================================================================
# Run Server
# ============================================================================

def run(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False):
    """Serve the application with uvicorn."""
    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host=host or default_settings.api_host,
        port=port or default_settings.api_port,
        reload=reload,
        log_level=default_settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
