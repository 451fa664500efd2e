"""mlpnet public API."""

from .core import activations  # noqa: F401
from .core.errors import (
    EmptyDataSet,
    InvalidBatchConfiguration,
    InvalidTopology,
    MLPError,
    ShapeMismatch,
)
from .core.network import Network
from .core.types import DataSet
from .training.metrics import evaluate
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer, gradient_descent, train

__all__ = [
    "DataSet",
    "EmptyDataSet",
    "InvalidBatchConfiguration",
    "InvalidTopology",
    "MLPError",
    "Network",
    "ShapeMismatch",
    "Trainer",
    "activations",
    "evaluate",
    "gradient_descent",
    "load_preset",
    "presets",
    "run_pipeline",
    "train",
]
