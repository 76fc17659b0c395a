"""Derivation of speed/bearing fields and their GeoJSON encoding."""

from .vector_field import MS_TO_KNOTS, VectorField, derive, speed_and_bearing
from .geojson_encoder import Feature, FeatureCollection, encode, encode_timestep

__all__ = [
    'MS_TO_KNOTS',
    'VectorField',
    'derive',
    'speed_and_bearing',
    'Feature',
    'FeatureCollection',
    'encode',
    'encode_timestep',
]
