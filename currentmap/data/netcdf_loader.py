"""
NetCDF loader for ocean current datasets.

Reads the raw velocity components, the time axis and the per-point
coordinates from a single NetCDF file. Values are returned flat, exactly as
stored, together with their declared shape and type; no derivation happens
here.

Requires:
- pip install xarray netcdf4
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Tuple

import numpy as np
import xarray as xr

from currentmap.exceptions import DatasetFileError, MissingVariableError, ShapeMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariableNames:
    """Names of the variables read from the dataset file.

    Unstructured ocean models index u/v by cell, so the cell-centre
    coordinates (latc/lonc) are the ones sharing their index space. The node
    coordinates (lat/lon) describe a different grid.
    """
    u: str = "u"        # eastward velocity (m/s)
    v: str = "v"        # northward velocity (m/s)
    time: str = "time"
    lat: str = "latc"
    lon: str = "lonc"


@dataclass(frozen=True, eq=False)
class RawVariable:
    """A named numeric array, flattened, with its declared shape and type."""
    name: str
    values: np.ndarray  # 1D, read-only
    shape: Tuple[int, ...]
    dtype: np.dtype
    dims: Tuple[str, ...] = ()
    units: Optional[str] = None

    @property
    def size(self) -> int:
        return int(self.values.size)


class RawVariables(NamedTuple):
    """The five variables the current pipeline needs."""
    u: RawVariable
    v: RawVariable
    time: RawVariable
    lat: RawVariable
    lon: RawVariable


def _open(path: Path) -> xr.Dataset:
    if not path.is_file():
        raise DatasetFileError(path, "file does not exist")
    try:
        # Raw numeric time axis; fill values become NaN
        return xr.open_dataset(path, decode_times=False, mask_and_scale=True)
    except Exception as e:
        raise DatasetFileError(path, f"{type(e).__name__}: {e}") from e


def _select_layer(da: xr.DataArray, layer_dim: Optional[str], layer_index: int) -> xr.DataArray:
    """Pick one vertical layer of a layered velocity field."""
    if not layer_dim or layer_dim not in da.dims:
        return da
    n_layers = da.sizes[layer_dim]
    if not -n_layers <= layer_index < n_layers:
        raise ShapeMismatchError(
            f"Layer index {layer_index} out of range for '{da.name}' "
            f"({layer_dim} has {n_layers} layers)"
        )
    return da.isel({layer_dim: layer_index})


def _extract(
    ds: xr.Dataset,
    name: str,
    path: Path,
    layer_dim: Optional[str] = None,
    layer_index: int = 0,
) -> RawVariable:
    if name not in ds.variables:
        raise MissingVariableError(name, path)

    da = _select_layer(ds[name], layer_dim, layer_index)
    try:
        values = np.asarray(da.values).ravel()
    except (OSError, RuntimeError, ValueError) as e:
        raise DatasetFileError(path, f"cannot read variable '{name}': {e}") from e
    values.setflags(write=False)

    return RawVariable(
        name=name,
        values=values,
        shape=tuple(int(s) for s in da.shape),
        dtype=values.dtype,
        dims=tuple(str(d) for d in da.dims),
        units=da.attrs.get("units"),
    )


def load(
    path,
    names: VariableNames = VariableNames(),
    layer_dim: Optional[str] = "siglay",
    layer_index: int = 0,
) -> RawVariables:
    """
    Load the raw variables of a current dataset.

    Args:
        path: NetCDF file path
        names: Variable names to read
        layer_dim: Vertical dimension of u/v to select a single layer from
            (ignored when the variables do not have it)
        layer_index: Layer to keep along layer_dim (0 = surface)

    Returns:
        RawVariables with u, v, time, lat, lon

    Raises:
        DatasetFileError: file missing or unreadable
        MissingVariableError: a required variable is absent
        ShapeMismatchError: layer_index outside the layer dimension
    """
    path = Path(path)
    logger.info(f"Loading NetCDF data from {path}")

    ds = _open(path)
    try:
        raw = RawVariables(
            u=_extract(ds, names.u, path, layer_dim, layer_index),
            v=_extract(ds, names.v, path, layer_dim, layer_index),
            time=_extract(ds, names.time, path),
            lat=_extract(ds, names.lat, path),
            lon=_extract(ds, names.lon, path),
        )
    finally:
        ds.close()

    logger.info(
        f"Loaded variables: u{raw.u.shape} v{raw.v.shape} time{raw.time.shape} "
        f"lat{raw.lat.shape} lon{raw.lon.shape}"
    )
    return raw


def describe(path) -> List[Dict]:
    """List every variable in a NetCDF file with its dims, shape and dtype."""
    path = Path(path)
    ds = _open(path)
    try:
        return [
            {
                "name": str(name),
                "dims": [str(d) for d in var.dims],
                "shape": [int(s) for s in var.shape],
                "dtype": str(var.dtype),
                "units": var.attrs.get("units"),
            }
            for name, var in ds.variables.items()
        ]
    finally:
        ds.close()
