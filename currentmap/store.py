"""
Immutable in-memory store of a current dataset.

The whole pipeline (load, derive, encode) runs once when the store is built.
Every time step's FeatureCollection is kept in memory so queries only have to
filter, never recompute. A build either completes or raises; there is no
partially built dataset.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import numpy as np

from currentmap.data.netcdf_loader import RawVariables, VariableNames, load
from currentmap.exceptions import ShapeMismatchError
from currentmap.processing.geojson_encoder import FeatureCollection, encode
from currentmap.processing.vector_field import derive
from currentmap.query import query

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class CurrentDataset:
    """Time axis plus one FeatureCollection per time step."""
    times: np.ndarray
    collections: Mapping[int, FeatureCollection]
    num_points: int
    time_units: Optional[str] = None
    source: Optional[str] = None

    def __post_init__(self):
        times = np.array(self.times, dtype=np.float64).ravel()
        times.setflags(write=False)
        object.__setattr__(self, "times", times)
        if not isinstance(self.collections, MappingProxyType):
            object.__setattr__(self, "collections", MappingProxyType(dict(self.collections)))
        if set(self.collections) != set(range(times.size)):
            raise ShapeMismatchError(
                f"Expected collections for time indices 0..{times.size - 1}, "
                f"got {len(self.collections)}"
            )

    @classmethod
    def from_variables(cls, raw: RawVariables, source: Optional[str] = None) -> "CurrentDataset":
        """
        Build a dataset from already loaded raw variables.

        Raises:
            ShapeMismatchError: velocity size is not T x N
        """
        num_times = raw.time.size
        num_points = raw.lat.size
        if raw.lon.size != num_points:
            raise ShapeMismatchError(
                f"Latitude has {num_points} points but longitude has {raw.lon.size}"
            )
        for var in (raw.u, raw.v):
            if var.size != num_times * num_points:
                raise ShapeMismatchError(
                    f"'{var.name}' has {var.size} elements, expected "
                    f"{num_times} time steps x {num_points} points = {num_times * num_points}"
                )

        derived = derive(raw.u.values, raw.v.values, raw.time.values)
        collections = encode(derived.speed, derived.bearing, raw.lat.values, raw.lon.values)

        return cls(
            times=raw.time.values,
            collections=collections,
            num_points=num_points,
            time_units=raw.time.units,
            source=source,
        )

    @property
    def num_times(self) -> int:
        return int(self.times.size)

    def collection(self, index: int) -> FeatureCollection:
        """Unfiltered FeatureCollection of a time step."""
        return self.collections[index]

    def get_feature_collection(
        self,
        time: float,
        min_lat: float,
        max_lat: float,
        min_lon: float,
        max_lon: float,
    ) -> FeatureCollection:
        """Features of the time step resolved for ``time`` inside the bounding box."""
        return query(self, time, min_lat, max_lat, min_lon, max_lon)

    def summary(self) -> Dict[str, Any]:
        """Dataset overview for diagnostics and the info endpoint."""
        counts = [len(self.collections[t]) for t in range(self.num_times)]
        return {
            "source": self.source,
            "num_times": self.num_times,
            "num_points": self.num_points,
            "time_units": self.time_units,
            "time_start": float(self.times[0]) if self.num_times else None,
            "time_end": float(self.times[-1]) if self.num_times else None,
            "features_per_time": {
                "min": min(counts) if counts else 0,
                "max": max(counts) if counts else 0,
                "total": sum(counts),
            },
        }


def build_dataset(
    path,
    names: VariableNames = VariableNames(),
    layer_dim: Optional[str] = "siglay",
    layer_index: int = 0,
) -> CurrentDataset:
    """
    Load a NetCDF file and build the complete, immutable dataset.

    Raises:
        DatasetFileError, MissingVariableError, ShapeMismatchError
    """
    path = Path(path)
    raw = load(path, names=names, layer_dim=layer_dim, layer_index=layer_index)
    dataset = CurrentDataset.from_variables(raw, source=str(path))
    logger.info(
        f"Current dataset ready: {dataset.num_times} time steps, "
        f"{dataset.num_points} points"
    )
    return dataset
