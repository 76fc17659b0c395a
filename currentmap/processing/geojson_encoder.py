"""
GeoJSON encoding of derived current fields.

Each timestamp becomes one FeatureCollection of Point features carrying the
current speed (kn) and direction (deg). Points with zero speed or any NaN
value are left out.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, NamedTuple, Sequence, Tuple

import numpy as np

from currentmap.exceptions import ShapeMismatchError

logger = logging.getLogger(__name__)


class Feature(NamedTuple):
    """One current vector at one grid point."""
    lon: float
    lat: float
    speed: float      # knots
    direction: float  # degrees clockwise from north

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": {
                "type": "Point",
                "coordinates": [self.lon, self.lat],
            },
            "properties": {"speed": self.speed, "direction": self.direction},
        }


def _readonly(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class FeatureCollection:
    """
    Immutable set of features for a single timestamp.

    Feature order is the grid index order of the source arrays. The
    longitude/latitude columns are kept alongside the features so bounding
    box filters can run as array masks.
    """
    features: Tuple[Feature, ...] = ()
    lons: np.ndarray = field(default=None, repr=False, compare=False)
    lats: np.ndarray = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "features", tuple(self.features))
        if self.lons is None:
            object.__setattr__(self, "lons", _readonly([f.lon for f in self.features]))
        if self.lats is None:
            object.__setattr__(self, "lats", _readonly([f.lat for f in self.features]))

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    def select(self, mask: np.ndarray) -> "FeatureCollection":
        """New collection holding the features where mask is True."""
        indices = np.flatnonzero(mask)
        return FeatureCollection(
            features=tuple(self.features[i] for i in indices),
            lons=_readonly(self.lons[indices]),
            lats=_readonly(self.lats[indices]),
        )

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [f.to_geojson() for f in self.features],
        }


def encode_timestep(
    speed: np.ndarray,
    bearing: np.ndarray,
    lat: np.ndarray,
    lon: np.ndarray,
) -> FeatureCollection:
    """
    Build the FeatureCollection for a single timestamp.

    All four arrays are 1D and aligned by grid index.
    """
    speed = np.asarray(speed, dtype=np.float64)
    bearing = np.asarray(bearing, dtype=np.float64)
    lat = np.asarray(lat, dtype=np.float64)
    lon = np.asarray(lon, dtype=np.float64)

    # Zero-speed points are not rendered anyway
    keep = speed != 0
    keep &= ~(np.isnan(speed) | np.isnan(bearing) | np.isnan(lat) | np.isnan(lon))

    indices = np.flatnonzero(keep)
    features = tuple(
        Feature(lon=x, lat=y, speed=s, direction=d)
        for x, y, s, d in zip(
            lon[indices].tolist(),
            lat[indices].tolist(),
            speed[indices].tolist(),
            bearing[indices].tolist(),
        )
    )
    return FeatureCollection(
        features=features,
        lons=_readonly(lon[indices]),
        lats=_readonly(lat[indices]),
    )


def encode(speed, bearing, lat, lon) -> Mapping[int, FeatureCollection]:
    """
    Encode every timestamp of a derived field as a FeatureCollection.

    Args:
        speed: [T, N] speed in knots
        bearing: [T, N] bearing in degrees
        lat: N latitudes
        lon: N longitudes

    Returns:
        Read-only mapping of time index (0..T-1) to FeatureCollection

    Raises:
        ShapeMismatchError: coordinate or field shapes disagree on N
    """
    speed = np.asarray(speed)
    bearing = np.asarray(bearing)
    lat = np.asarray(lat).ravel()
    lon = np.asarray(lon).ravel()

    if speed.ndim != 2 or speed.shape != bearing.shape:
        raise ShapeMismatchError(
            f"Speed {speed.shape} and bearing {bearing.shape} must be matching [T, N] arrays"
        )
    num_points = speed.shape[1]
    if lat.size != num_points or lon.size != num_points:
        raise ShapeMismatchError(
            f"Velocity has {num_points} points per time step but "
            f"latitude has {lat.size} and longitude has {lon.size}"
        )

    logger.info(f"Converting to GeoJSON ({speed.shape[0]} time steps)")
    collections: Dict[int, FeatureCollection] = {
        t: encode_timestep(speed[t], bearing[t], lat, lon)
        for t in range(speed.shape[0])
    }

    kept = sum(len(c) for c in collections.values())
    logger.info(f"Encoded {kept} features out of {speed.size} grid values")
    return MappingProxyType(collections)
