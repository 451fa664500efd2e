"""Core typing contracts for mlpnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence

import numpy as np

from .errors import EmptyDataSet, ShapeMismatch

Array = np.ndarray


@dataclass(frozen=True)
class ActivationTrace:
    """Intermediate values captured during a single forward pass.

    ``activations[0]`` is the input column and ``activations[-1]`` the network
    output; ``weighted_sums[i]`` is the pre-activation of layer ``i + 1``.
    """

    activations: List[Array]
    weighted_sums: List[Array]

    @property
    def output(self) -> Array:
        return self.activations[-1]


@dataclass(frozen=True)
class Gradients:
    """Per-layer cost gradients, shaped like the network parameters."""

    weights: List[Array]
    biases: List[Array]

    def __len__(self) -> int:
        return len(self.weights)


@dataclass(frozen=True)
class DataSet:
    """Parallel sequences of input and target column vectors."""

    inputs: Sequence[Array]
    targets: Sequence[Array]

    def __post_init__(self) -> None:
        if len(self.inputs) != len(self.targets):
            raise ShapeMismatch(
                f"DataSet has {len(self.inputs)} inputs but {len(self.targets)} targets"
            )

    def __len__(self) -> int:
        return len(self.inputs)

    def __iter__(self) -> Iterator[tuple[Array, Array]]:
        return iter(zip(self.inputs, self.targets))

    def __getitem__(self, index: slice) -> "DataSet":
        if not isinstance(index, slice):
            raise TypeError(f"DataSet indices must be slices, got {type(index).__name__}")
        return DataSet(inputs=list(self.inputs[index]), targets=list(self.targets[index]))

    def shuffled(self, rng: np.random.Generator) -> "DataSet":
        """Return a copy permuted by one draw from ``rng``."""

        order = rng.permutation(len(self))
        return DataSet(
            inputs=[self.inputs[i] for i in order],
            targets=[self.targets[i] for i in order],
        )

    def batches(self, batch_size: int, *, drop_last: bool = True) -> Iterator["DataSet"]:
        """Yield contiguous slices of ``batch_size`` samples.

        With ``drop_last`` a trailing slice shorter than ``batch_size`` is not
        yielded.
        """

        n = len(self)
        for start in range(0, n, batch_size):
            end = start + batch_size
            if end > n and drop_last:
                return
            yield self[start:end]

    def require_samples(self, what: str = "data set") -> None:
        if len(self) == 0:
            raise EmptyDataSet(f"{what} has no samples")

    @classmethod
    def from_arrays(cls, inputs: Array, targets: Array) -> "DataSet":
        """Build a DataSet from row-major ``(n, d)`` arrays."""

        inputs = np.asarray(inputs, dtype=np.float64)
        targets = np.asarray(targets, dtype=np.float64)
        if inputs.ndim != 2 or targets.ndim != 2:
            raise ShapeMismatch("from_arrays expects two 2-D arrays")
        return cls(
            inputs=[row.reshape(-1, 1) for row in inputs],
            targets=[row.reshape(-1, 1) for row in targets],
        )


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`mlpnet.training.pipelines.run_pipeline`."""

    epochs: int
    accuracy: float
    metrics_path: str
    manifest_path: str


__all__ = [
    "Array",
    "ActivationTrace",
    "Gradients",
    "DataSet",
    "RunResult",
]
