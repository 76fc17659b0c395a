"""
Ocean current router for the CURRENTMAP API.

Endpoints:
    GET  /api/currents          → FeatureCollection for a time and bounding box
    GET  /api/currents/times    → time axis (timeline slider)
    GET  /api/currents/info     → dataset summary
"""

import logging

from fastapi import APIRouter, Depends, Query

from api.schemas import CurrentFeatureCollection, DatasetInfoResponse, TimeAxisResponse
from api.state import get_dataset
from currentmap.store import CurrentDataset

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/currents", tags=["Currents"])


@router.get("", responses={200: {"model": CurrentFeatureCollection}})
async def get_feature_collection(
    time: float = Query(
        ...,
        allow_inf_nan=False,
        description="Requested time, in the units of the dataset time axis",
    ),
    min_lat: float = Query(-90.0),
    max_lat: float = Query(90.0),
    min_lon: float = Query(-180.0),
    max_lon: float = Query(180.0),
    dataset: CurrentDataset = Depends(get_dataset),
):
    """
    Get current vectors for a time and bounding box.

    The most recent time step at or before ``time`` is used; a time before the
    start of the dataset falls back to the first step. Bounds are inclusive.
    An inverted box returns an empty collection.
    """
    collection = dataset.get_feature_collection(time, min_lat, max_lat, min_lon, max_lon)
    logger.debug(f"Currents query t={time}: {len(collection)} features")
    return collection.to_geojson()


@router.get("/times", response_model=TimeAxisResponse)
async def get_time_axis(dataset: CurrentDataset = Depends(get_dataset)):
    """Get the dataset time axis, in file units."""
    return TimeAxisResponse(
        units=dataset.time_units,
        count=dataset.num_times,
        times=dataset.times.tolist(),
    )


@router.get("/info", response_model=DatasetInfoResponse)
async def get_dataset_info(dataset: CurrentDataset = Depends(get_dataset)):
    """Get a summary of the loaded dataset."""
    return DatasetInfoResponse(**dataset.summary())
