"""Matrix operations used by the network engine.

The forward and backward passes only talk to a :class:`MatrixOps`
implementation, so a different numeric backend can be dropped in without
touching the algorithms. :class:`NumpyOps` is the default.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

import numpy as np

from .types import Array


class MatrixOps(Protocol):
    """Protocol implemented by matrix backends."""

    def matmul(self, a: Array, b: Array) -> Array:
        """Matrix product ``a · b``."""

    def transpose(self, a: Array) -> Array:
        """Return ``aᵀ``."""

    def add(self, a: Array, b: Array) -> Array:
        """Elementwise ``a + b``."""

    def sub(self, a: Array, b: Array) -> Array:
        """Elementwise ``a - b``."""

    def isub(self, target: Array, value: Array) -> None:
        """Subtract ``value`` from ``target`` in place."""

    def hadamard(self, a: Array, b: Array) -> Array:
        """Elementwise product ``a ⊙ b``."""

    def scale(self, a: Array, factor: float) -> Array:
        """Multiply every entry of ``a`` by ``factor``."""

    def apply(self, fn: Callable[[Array], Array], a: Array) -> Array:
        """Apply the vectorised ``fn`` to every entry of ``a``."""

    def standard_normal(self, rng: np.random.Generator, shape: Sequence[int]) -> Array:
        """Draw a matrix of independent N(0, 1) samples."""

    def argmax(self, a: Array) -> int:
        """Flat index of the largest entry (first one on ties)."""


@dataclass(frozen=True)
class NumpyOps:
    """Dense float64 backend built on NumPy."""

    dtype: type = np.float64

    def matmul(self, a: Array, b: Array) -> Array:
        return a @ b

    def transpose(self, a: Array) -> Array:
        return a.T

    def add(self, a: Array, b: Array) -> Array:
        return a + b

    def sub(self, a: Array, b: Array) -> Array:
        return a - b

    def isub(self, target: Array, value: Array) -> None:
        np.subtract(target, value, out=target)

    def hadamard(self, a: Array, b: Array) -> Array:
        return a * b

    def scale(self, a: Array, factor: float) -> Array:
        return a * factor

    def apply(self, fn: Callable[[Array], Array], a: Array) -> Array:
        return np.asarray(fn(a), dtype=self.dtype)

    def standard_normal(self, rng: np.random.Generator, shape: Sequence[int]) -> Array:
        return rng.standard_normal(tuple(shape)).astype(self.dtype)

    def argmax(self, a: Array) -> int:
        return int(np.argmax(a))


DEFAULT_OPS = NumpyOps()


def outer(ops: MatrixOps, column: Array, row_source: Array) -> Array:
    """Return ``column · row_sourceᵀ`` through ``ops``."""

    return ops.matmul(column, ops.transpose(row_source))


__all__ = ["MatrixOps", "NumpyOps", "DEFAULT_OPS", "outer"]
