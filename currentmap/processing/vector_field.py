"""
Speed and bearing derivation from eastward/northward velocity components.

Bearings follow the nautical convention: 0 deg is north, 90 deg is east,
measured clockwise. Speeds are reported in knots.
"""

import logging
from dataclasses import dataclass

import numpy as np

from currentmap.exceptions import ShapeMismatchError

logger = logging.getLogger(__name__)

MS_TO_KNOTS = 1.94384


@dataclass(frozen=True, eq=False)
class VectorField:
    """Derived speed (kn) and bearing (deg) arrays, both shaped [T, N]."""
    speed: np.ndarray
    bearing: np.ndarray

    @property
    def num_times(self) -> int:
        return self.speed.shape[0]

    @property
    def num_points(self) -> int:
        return self.speed.shape[1]


def reshape_by_time(values: np.ndarray, num_times: int, name: str = "values") -> np.ndarray:
    """
    Partition a flat (time, point) array into num_times rows.

    Raises:
        ShapeMismatchError: if the size is not a whole multiple of num_times
    """
    values = np.asarray(values).ravel()
    if num_times <= 0:
        raise ShapeMismatchError(f"Time axis is empty, cannot reshape '{name}'")
    if values.size % num_times != 0:
        raise ShapeMismatchError(
            f"'{name}' has {values.size} elements, not divisible by "
            f"{num_times} time steps"
        )
    return values.reshape(num_times, values.size // num_times)


def speed_and_bearing(u: np.ndarray, v: np.ndarray):
    """
    Elementwise speed (kn) and bearing (deg, [0, 360)) from u/v in m/s.

    The velocity is treated as the complex number v + i*u: northward on the
    real axis, eastward on the imaginary axis. Its phase is then the angle
    clockwise from north, which avoids the east-based angle of atan2(v, u).
    """
    complex_velocity = np.asarray(v, dtype=np.float64) + 1j * np.asarray(u, dtype=np.float64)

    speed_kt = np.abs(complex_velocity) * MS_TO_KNOTS

    bearing = np.degrees(np.angle(complex_velocity))
    bearing = np.where(bearing < 0, bearing + 360.0, bearing)
    # -1e-15 + 360 rounds to 360.0
    bearing = np.where(bearing >= 360.0, bearing - 360.0, bearing)

    return speed_kt, bearing


def derive(u, v, time) -> VectorField:
    """
    Derive per-timestamp, per-point speed and bearing.

    Args:
        u: Flat eastward velocity, ordered (time, point), m/s
        v: Flat northward velocity, same layout as u
        time: Time axis; only its length is used

    Returns:
        VectorField with [T, N] speed and bearing arrays

    Raises:
        ShapeMismatchError: u/v sizes differ or are not divisible by T
    """
    num_times = int(np.asarray(time).size)

    u = np.asarray(u).ravel()
    v = np.asarray(v).ravel()
    if u.size != v.size:
        raise ShapeMismatchError(
            f"Velocity components differ in size: u has {u.size}, v has {v.size}"
        )

    u2d = reshape_by_time(u, num_times, "u")
    v2d = reshape_by_time(v, num_times, "v")

    logger.info(f"Getting speed and direction arrays ({num_times} x {u2d.shape[1]})")
    speed, bearing = speed_and_bearing(u2d, v2d)

    speed.setflags(write=False)
    bearing.setflags(write=False)
    return VectorField(speed=speed, bearing=bearing)
