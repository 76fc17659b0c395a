"""
CURRENTMAP - ocean current dataset server.

Loads a NetCDF current dataset once, derives speed and bearing for every
grid point and time step, and answers time + bounding box queries with
GeoJSON FeatureCollections.
"""

__version__ = "1.0.0"

from currentmap.exceptions import (
    DatasetError,
    DatasetFileError,
    MissingVariableError,
    ShapeMismatchError,
)
from currentmap.store import CurrentDataset, build_dataset
from currentmap.query import query, resolve_time_index

__all__ = [
    '__version__',
    'DatasetError',
    'DatasetFileError',
    'MissingVariableError',
    'ShapeMismatchError',
    'CurrentDataset',
    'build_dataset',
    'query',
    'resolve_time_index',
]
