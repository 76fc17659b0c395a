"""Dataset loading for NetCDF current files."""

from .netcdf_loader import (
    RawVariable,
    RawVariables,
    VariableNames,
    describe,
    load,
)

__all__ = [
    'RawVariable',
    'RawVariables',
    'VariableNames',
    'describe',
    'load',
]
