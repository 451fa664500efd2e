"""Exception types raised at the mlpnet API boundary."""

from __future__ import annotations


class MLPError(ValueError):
    """Base class for malformed network, data or training arguments."""


class InvalidTopology(MLPError):
    """Raised for fewer than two layers or a non-positive layer width."""


class ShapeMismatch(MLPError):
    """Raised when a vector's length disagrees with the layer it feeds."""


class InvalidBatchConfiguration(MLPError):
    """Raised for a non-positive batch size or one larger than the data set."""


class EmptyDataSet(MLPError):
    """Raised when training or evaluation is given zero samples."""


__all__ = [
    "MLPError",
    "InvalidTopology",
    "ShapeMismatch",
    "InvalidBatchConfiguration",
    "EmptyDataSet",
]
