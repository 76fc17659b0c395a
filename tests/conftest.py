"""
Shared pytest fixtures for CURRENTMAP tests.

Datasets are small NetCDF files written with xarray into tmp_path, laid out
like unstructured ocean model output: u/v over (time, nele) and cell-centre
coordinates latc/lonc over (nele).
"""

import os

import numpy as np
import pytest
import xarray as xr
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY api.* imports)
# ---------------------------------------------------------------------------
os.environ.setdefault("CURRENTMAP_ENVIRONMENT", "development")
os.environ.setdefault("CURRENTMAP_LOG_LEVEL", "warning")

TIME_UNITS = "days since 1858-11-17 00:00:00"


def write_current_file(
    path,
    u,
    v,
    time,
    lat,
    lon,
    lat_name="latc",
    lon_name="lonc",
    layered=False,
):
    """Write a current dataset to ``path`` and return the path.

    With layered=True, u and v must be [T, siglay, N] arrays.
    """
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    vel_dims = ("time", "siglay", "nele") if layered else ("time", "nele")

    ds = xr.Dataset(
        data_vars={
            "u": (vel_dims, u, {"units": "meters s-1", "long_name": "Eastward Water Velocity"}),
            "v": (vel_dims, v, {"units": "meters s-1", "long_name": "Northward Water Velocity"}),
            lat_name: ("nele", np.asarray(lat, dtype=np.float64), {"units": "degrees_north"}),
            lon_name: ("nele", np.asarray(lon, dtype=np.float64), {"units": "degrees_east"}),
        },
        coords={
            "time": ("time", np.asarray(time, dtype=np.float64), {"units": TIME_UNITS}),
        },
    )
    ds.to_netcdf(path)
    return path


# ---------------------------------------------------------------------------
# Section 2: Dataset fixtures
# ---------------------------------------------------------------------------

# Three time steps, four points; see sample_arrays for the exclusions
SAMPLE_TIMES = [0.0, 10.0, 20.0]
SAMPLE_LAT = [41.0, 41.5, 42.0, 42.5]
SAMPLE_LON = [-71.0, -70.5, -70.0, -69.5]


@pytest.fixture
def sample_arrays():
    """u/v arrays for a [3 x 4] dataset.

    t=0: all four points have current
    t=1: point 1 is at rest (speed 0), point 3 is a model gap (NaN)
    t=2: point 0 flows due west
    """
    u = np.array([
        [3.0, 0.0, 1.0, -1.0],
        [0.5, 0.0, 0.2, np.nan],
        [-2.0, 0.1, 0.1, 0.1],
    ])
    v = np.array([
        [4.0, 1.0, 0.0, 0.0],
        [0.5, 0.0, 0.2, 0.3],
        [0.0, 0.1, 0.1, 0.1],
    ])
    return u, v


@pytest.fixture
def sample_file(tmp_path, sample_arrays):
    """NetCDF file holding the sample dataset."""
    u, v = sample_arrays
    return write_current_file(
        tmp_path / "currents.nc", u, v, SAMPLE_TIMES, SAMPLE_LAT, SAMPLE_LON
    )


@pytest.fixture
def sample_dataset(sample_file):
    """Fully built CurrentDataset from the sample file."""
    from currentmap.store import build_dataset

    return build_dataset(sample_file)


# ---------------------------------------------------------------------------
# Section 3: API client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client(sample_dataset):
    """FastAPI TestClient serving the sample dataset."""
    from api.main import create_app
    from api.state import ApplicationState

    app = create_app(app_state=ApplicationState(dataset=sample_dataset))
    with TestClient(app) as test_client:
        yield test_client
