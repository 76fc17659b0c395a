"""
Load-time errors for the current dataset pipeline.

All of these are fatal: they are raised while the dataset is being built and
propagate to whatever is starting the service. Nothing at query time raises.
"""
from typing import Optional


class DatasetError(Exception):
    """Base class for every fault raised while loading a current dataset."""


class DatasetFileError(DatasetError):
    """The dataset file is missing, unreadable, or not valid NetCDF."""

    def __init__(self, path, reason: Optional[str] = None):
        self.path = str(path)
        self.reason = reason
        message = f"Cannot open dataset file {self.path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MissingVariableError(DatasetError):
    """A required named variable is absent from the dataset file."""

    def __init__(self, variable: str, path=None):
        self.variable = variable
        self.path = str(path) if path is not None else None
        where = f" in {self.path}" if self.path else ""
        super().__init__(f"Required variable '{variable}' not found{where}")


class ShapeMismatchError(DatasetError):
    """Array sizes are inconsistent across variables or with the time axis."""
