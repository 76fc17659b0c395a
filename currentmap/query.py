"""
Spatiotemporal queries against a built current dataset.

A query picks the most recent time step not after the requested time and
returns the features of that step inside an inclusive lat/lon bounding box.
Everything here is a pure function of the immutable dataset.
"""

from typing import TYPE_CHECKING

import numpy as np

from currentmap.processing.geojson_encoder import FeatureCollection

if TYPE_CHECKING:
    from currentmap.store import CurrentDataset


def resolve_time_index(times: np.ndarray, time: float) -> int:
    """
    Index of the last time step at or before ``time``.

    Equal timestamps resolve to the highest index. When ``time`` is earlier
    than the whole axis the first step (index 0) is returned instead of
    signalling a miss. NaN is at or after no step, so it gets index 0 too.

    Args:
        times: Non-decreasing time axis
        time: Requested time, same units as the axis
    """
    if np.isnan(time):
        return 0
    idx = int(np.searchsorted(times, time, side="right")) - 1
    return max(idx, 0)


def filter_bbox(
    collection: FeatureCollection,
    min_lat: float,
    max_lat: float,
    min_lon: float,
    max_lon: float,
) -> FeatureCollection:
    """Features inside the box, all four edges inclusive, original order kept."""
    lons = collection.lons
    lats = collection.lats
    mask = (lons >= min_lon) & (lons <= max_lon) & (lats >= min_lat) & (lats <= max_lat)
    return collection.select(mask)


def query(
    dataset: "CurrentDataset",
    time: float,
    min_lat: float,
    max_lat: float,
    min_lon: float,
    max_lon: float,
) -> FeatureCollection:
    """
    Current features for a time and bounding box.

    An inverted box (min greater than max) simply matches nothing.
    """
    time_idx = resolve_time_index(dataset.times, time)
    return filter_bbox(dataset.collection(time_idx), min_lat, max_lat, min_lon, max_lon)
