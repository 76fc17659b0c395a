"""Current dataset API schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field


class FeatureCountSummary(BaseModel):
    """Surviving feature counts across time steps."""
    min: int
    max: int
    total: int


class DatasetInfoResponse(BaseModel):
    """Summary of the loaded current dataset."""
    source: Optional[str] = None
    num_times: int
    num_points: int
    time_units: Optional[str] = None
    time_start: Optional[float] = None
    time_end: Optional[float] = None
    features_per_time: FeatureCountSummary


class TimeAxisResponse(BaseModel):
    """Time axis of the dataset, in file units."""
    units: Optional[str] = None
    count: int
    times: List[float]


class PointGeometry(BaseModel):
    type: str = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)  # [lon, lat]


class CurrentProperties(BaseModel):
    speed: float  # knots
    direction: float  # degrees clockwise from north, [0, 360)


class CurrentFeature(BaseModel):
    type: str = "Feature"
    geometry: PointGeometry
    properties: CurrentProperties


class CurrentFeatureCollection(BaseModel):
    """GeoJSON FeatureCollection of current vectors (documentation schema)."""
    type: str = "FeatureCollection"
    features: List[CurrentFeature]
