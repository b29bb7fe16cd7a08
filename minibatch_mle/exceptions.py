"""Precondition errors raised before any optimizer iteration runs."""


class ShapeMismatchError(ValueError):
    """Independent time series and their time steps do not line up."""


class DimensionMismatchError(ValueError):
    """Initial conditions cannot be read off data that are not the raw states."""
