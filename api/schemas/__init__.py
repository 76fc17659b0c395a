"""
CURRENTMAP API Pydantic schemas.

Re-exports all schema classes:
    from api.schemas import DatasetInfoResponse, TimeAxisResponse, ...
"""

from .currents import (  # noqa: F401
    FeatureCountSummary,
    DatasetInfoResponse,
    TimeAxisResponse,
    PointGeometry,
    CurrentProperties,
    CurrentFeature,
    CurrentFeatureCollection,
)
