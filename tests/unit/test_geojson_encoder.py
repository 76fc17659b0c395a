"""
Unit tests for GeoJSON encoding of derived current fields.

Tests point exclusion, ordering, output shape and immutability.
"""

import math

import numpy as np
import pytest

from currentmap.exceptions import ShapeMismatchError
from currentmap.processing.geojson_encoder import (
    Feature,
    FeatureCollection,
    encode,
    encode_timestep,
)

LAT = np.array([10.0, 11.0, 12.0])
LON = np.array([20.0, 21.0, 22.0])


class TestEncodeTimestep:
    """Tests for encode_timestep()."""

    def test_all_points_kept(self):
        fc = encode_timestep([1.0, 2.0, 3.0], [0.0, 90.0, 180.0], LAT, LON)
        assert len(fc) == 3
        assert fc.features[1] == Feature(lon=21.0, lat=11.0, speed=2.0, direction=90.0)

    def test_zero_speed_dropped(self):
        fc = encode_timestep([1.0, 0.0, 3.0], [0.0, 90.0, 180.0], LAT, LON)
        assert [f.lat for f in fc] == [10.0, 12.0]

    def test_zero_speed_dropped_even_with_valid_coordinates(self):
        fc = encode_timestep([0.0, 0.0, 0.0], [10.0, 20.0, 30.0], LAT, LON)
        assert len(fc) == 0

    @pytest.mark.parametrize("column", ["speed", "bearing", "lat", "lon"])
    def test_nan_in_any_value_dropped(self, column):
        values = {
            "speed": np.array([1.0, 2.0, 3.0]),
            "bearing": np.array([0.0, 90.0, 180.0]),
            "lat": LAT.copy(),
            "lon": LON.copy(),
        }
        values[column][1] = np.nan
        fc = encode_timestep(values["speed"], values["bearing"], values["lat"], values["lon"])
        assert [f.lon for f in fc] == [20.0, 22.0]

    def test_grid_order_preserved(self):
        lat = np.array([50.0, 10.0, 30.0])
        lon = np.array([5.0, -5.0, 0.0])
        fc = encode_timestep([1.0, 1.0, 1.0], [0.0, 0.0, 0.0], lat, lon)
        assert [f.lat for f in fc] == [50.0, 10.0, 30.0]

    def test_values_are_python_floats(self):
        fc = encode_timestep(np.array([1.5], dtype=np.float32), [45.0], [1.0], [2.0])
        feature = fc.features[0]
        assert type(feature.speed) is float
        assert type(feature.lon) is float

    def test_coordinate_columns_match_features(self):
        fc = encode_timestep([1.0, 0.0, 3.0], [0.0, 0.0, 0.0], LAT, LON)
        np.testing.assert_array_equal(fc.lons, [20.0, 22.0])
        np.testing.assert_array_equal(fc.lats, [10.0, 12.0])


class TestGeoJSON:
    """GeoJSON output shape."""

    def test_feature_geojson(self):
        feature = Feature(lon=-70.5, lat=41.2, speed=1.5, direction=270.0)
        assert feature.to_geojson() == {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [-70.5, 41.2]},
            "properties": {"speed": 1.5, "direction": 270.0},
        }

    def test_collection_geojson(self):
        fc = encode_timestep([1.0, 2.0], [0.0, 90.0], [1.0, 2.0], [3.0, 4.0])
        data = fc.to_geojson()
        assert data["type"] == "FeatureCollection"
        assert len(data["features"]) == 2
        assert data["features"][0]["geometry"]["coordinates"] == [3.0, 1.0]

    def test_empty_collection_geojson(self):
        assert FeatureCollection().to_geojson() == {"type": "FeatureCollection", "features": []}


class TestEncode:
    """Tests for encode() over all time steps."""

    def test_every_time_index_present(self):
        speed = np.array([[1.0, 1.0, 1.0], [0.0, 0.0, 0.0]])
        bearing = np.zeros((2, 3))
        collections = encode(speed, bearing, LAT, LON)
        assert set(collections) == {0, 1}
        assert len(collections[0]) == 3
        assert len(collections[1]) == 0

    def test_surviving_bearings_in_range(self):
        rng = np.random.default_rng(1)
        speed = rng.uniform(0.1, 2.0, size=(5, 3))
        bearing = rng.uniform(0.0, 360.0, size=(5, 3))
        for fc in encode(speed, bearing, LAT, LON).values():
            for feature in fc:
                assert 0.0 <= feature.direction < 360.0
                assert not math.isnan(feature.speed)

    def test_coordinate_count_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            encode(np.ones((2, 3)), np.ones((2, 3)), LAT[:2], LON)

    def test_field_shape_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            encode(np.ones((2, 3)), np.ones((3, 2)), LAT, LON)

    def test_mapping_is_read_only(self):
        collections = encode(np.ones((1, 3)), np.ones((1, 3)), LAT, LON)
        with pytest.raises(TypeError):
            collections[0] = FeatureCollection()

    def test_features_are_immutable(self):
        fc = encode(np.ones((1, 3)), np.ones((1, 3)), LAT, LON)[0]
        with pytest.raises(AttributeError):
            fc.features[0].lon = 0.0
        with pytest.raises(ValueError):
            fc.lons[0] = 0.0
