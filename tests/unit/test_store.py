"""
Unit tests for the immutable current dataset store.

Uses the sample dataset from conftest: 3 time steps x 4 points with one
zero-speed point and one NaN gap at t=1.
"""

import numpy as np
import pytest

from currentmap.data.netcdf_loader import RawVariable, RawVariables, VariableNames
from currentmap.exceptions import (
    DatasetFileError,
    MissingVariableError,
    ShapeMismatchError,
)
from currentmap.store import CurrentDataset, build_dataset
from tests.conftest import SAMPLE_LAT, SAMPLE_LON, SAMPLE_TIMES, TIME_UNITS


def _raw(name, values):
    values = np.asarray(values, dtype=np.float64).ravel()
    return RawVariable(name=name, values=values, shape=values.shape, dtype=values.dtype)


def _raw_variables(u, v, time, lat, lon):
    return RawVariables(
        u=_raw("u", u), v=_raw("v", v), time=_raw("time", time),
        lat=_raw("latc", lat), lon=_raw("lonc", lon),
    )


class TestBuildDataset:
    """Tests for build_dataset()."""

    def test_dimensions(self, sample_dataset):
        assert sample_dataset.num_times == 3
        assert sample_dataset.num_points == 4
        np.testing.assert_array_equal(sample_dataset.times, SAMPLE_TIMES)
        assert sample_dataset.time_units == TIME_UNITS

    def test_collection_per_time_step(self, sample_dataset):
        assert [len(sample_dataset.collection(t)) for t in range(3)] == [4, 2, 4]

    def test_first_point_derivation(self, sample_dataset):
        feature = sample_dataset.collection(0).features[0]
        assert feature.lon == SAMPLE_LON[0]
        assert feature.lat == SAMPLE_LAT[0]
        assert feature.speed == pytest.approx(9.7192)
        assert feature.direction == pytest.approx(36.87, abs=0.01)

    def test_zero_and_nan_points_excluded(self, sample_dataset):
        lats = [f.lat for f in sample_dataset.collection(1)]
        assert lats == [SAMPLE_LAT[0], SAMPLE_LAT[2]]

    def test_point_count_independent_of_exclusions(self, sample_dataset):
        """N stays the grid size even when points drop out."""
        assert sample_dataset.num_points == len(SAMPLE_LAT)
        assert len(sample_dataset.collection(1)) < sample_dataset.num_points

    def test_bearings_in_range(self, sample_dataset):
        for t in range(sample_dataset.num_times):
            for feature in sample_dataset.collection(t):
                assert 0.0 <= feature.direction < 360.0

    def test_source_recorded(self, sample_dataset, sample_file):
        assert sample_dataset.source == str(sample_file)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(DatasetFileError):
            build_dataset(tmp_path / "missing.nc")

    def test_missing_variable_raises(self, sample_file):
        with pytest.raises(MissingVariableError):
            build_dataset(sample_file, names=VariableNames(time="ocean_time"))


class TestFromVariables:
    """Tests for CurrentDataset.from_variables()."""

    def test_velocity_size_must_be_t_times_n(self):
        raw = _raw_variables(
            u=np.ones(6), v=np.ones(6), time=[0.0, 1.0], lat=[1.0, 2.0], lon=[3.0, 4.0],
        )
        with pytest.raises(ShapeMismatchError):
            CurrentDataset.from_variables(raw)

    def test_coordinate_counts_must_match(self):
        raw = _raw_variables(
            u=np.ones(4), v=np.ones(4), time=[0.0, 1.0], lat=[1.0, 2.0], lon=[3.0],
        )
        with pytest.raises(ShapeMismatchError):
            CurrentDataset.from_variables(raw)

    def test_single_point_single_time(self):
        raw = _raw_variables(u=[3.0], v=[4.0], time=[0.0], lat=[45.0], lon=[-60.0])
        dataset = CurrentDataset.from_variables(raw)
        feature = dataset.collection(0).features[0]
        assert feature.speed == pytest.approx(9.7192)
        assert feature.direction == pytest.approx(36.8699, abs=1e-4)


class TestImmutability:
    """The dataset cannot be changed after construction."""

    def test_fields_frozen(self, sample_dataset):
        with pytest.raises(AttributeError):
            sample_dataset.num_points = 10

    def test_times_read_only(self, sample_dataset):
        with pytest.raises(ValueError):
            sample_dataset.times[0] = 100.0

    def test_collections_read_only(self, sample_dataset):
        with pytest.raises(TypeError):
            sample_dataset.collections[0] = sample_dataset.collection(1)

    def test_incomplete_collections_rejected(self, sample_dataset):
        with pytest.raises(ShapeMismatchError):
            CurrentDataset(
                times=[0.0, 1.0],
                collections={0: sample_dataset.collection(0)},
                num_points=4,
            )


class TestSummary:
    """Tests for CurrentDataset.summary()."""

    def test_summary(self, sample_dataset):
        summary = sample_dataset.summary()
        assert summary["num_times"] == 3
        assert summary["num_points"] == 4
        assert summary["time_start"] == 0.0
        assert summary["time_end"] == 20.0
        assert summary["features_per_time"] == {"min": 2, "max": 4, "total": 10}


class TestGetFeatureCollection:
    """CurrentDataset.get_feature_collection() delegates to the query engine."""

    def test_time_resolution_scenarios(self, sample_dataset):
        world = (-90, 90, -180, 180)
        assert sample_dataset.get_feature_collection(15, *world) == sample_dataset.collection(1)
        assert sample_dataset.get_feature_collection(25, *world) == sample_dataset.collection(2)
        assert sample_dataset.get_feature_collection(-5, *world) == sample_dataset.collection(0)

    def test_bbox(self, sample_dataset):
        result = sample_dataset.get_feature_collection(0.0, 41.5, 42.0, -70.5, -70.0)
        assert [(f.lat, f.lon) for f in result] == [(41.5, -70.5), (42.0, -70.0)]
