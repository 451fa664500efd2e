"""Fully-connected feedforward network with a sigmoid forward pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

import numpy as np

from .activations import Activation, get_activation
from .errors import InvalidTopology, ShapeMismatch
from .linalg import DEFAULT_OPS, MatrixOps
from .types import ActivationTrace, Array, Gradients


def as_column(x: Array, width: int, what: str = "input") -> Array:
    """Return ``x`` as a ``(width, 1)`` float column or raise ShapeMismatch."""

    x = np.asarray(x, dtype=np.float64)
    if x.ndim == 1 and x.shape[0] == width:
        return x.reshape(width, 1)
    if x.shape != (width, 1):
        raise ShapeMismatch(f"{what} has shape {x.shape}, expected ({width}, 1)")
    return x


def _check_sizes(sizes: Sequence[int]) -> tuple[int, ...]:
    sizes = tuple(sizes)
    if len(sizes) < 2:
        raise InvalidTopology("network must have at least two layers")
    message = f"layer widths must be positive integers, got {sizes}"
    widths = []
    for width in sizes:
        if isinstance(width, bool):
            raise InvalidTopology(message)
        try:
            as_int = int(width)
        except (TypeError, ValueError) as exc:
            raise InvalidTopology(message) from exc
        if as_int != width or as_int <= 0:
            raise InvalidTopology(message)
        widths.append(as_int)
    return tuple(widths)


@dataclass
class Network:
    """Weights and biases of a dense MLP.

    ``weights[i]`` has shape ``(sizes[i + 1], sizes[i])`` so that entry
    ``[j, k]`` connects neuron ``k`` of layer ``i`` to neuron ``j`` of layer
    ``i + 1``. ``biases[i]`` is a ``(sizes[i + 1], 1)`` column.

    Parameters are drawn once from the standard normal distribution using
    ``rng``; pass a seeded ``numpy.random.Generator`` for reproducible runs.
    After construction the only mutator is :meth:`apply_gradients`.
    """

    sizes: Sequence[int]
    rng: np.random.Generator | None = field(default=None, repr=False)
    activation: str = "sigmoid"
    ops: MatrixOps = field(default=DEFAULT_OPS, repr=False)
    weights: List[Array] = field(init=False, repr=False)
    biases: List[Array] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.sizes = _check_sizes(self.sizes)
        self._activation: Activation = get_activation(self.activation)
        rng = self.rng if self.rng is not None else np.random.default_rng()
        weights: list[Array] = []
        biases: list[Array] = []
        for in_dim, out_dim in zip(self.sizes[:-1], self.sizes[1:]):
            weights.append(self.ops.standard_normal(rng, (out_dim, in_dim)))
            biases.append(self.ops.standard_normal(rng, (out_dim, 1)))
        self.weights = weights
        self.biases = biases

    @classmethod
    def from_parameters(
        cls,
        weights: Sequence[Array],
        biases: Sequence[Array],
        *,
        activation: str = "sigmoid",
        ops: MatrixOps = DEFAULT_OPS,
    ) -> "Network":
        """Build a network around explicit parameter matrices."""

        if len(weights) == 0 or len(weights) != len(biases):
            raise InvalidTopology(
                f"need one bias per weight matrix, got {len(weights)} and {len(biases)}"
            )
        weights = [np.array(w, dtype=np.float64, ndmin=2) for w in weights]
        sizes = [weights[0].shape[1]]
        for idx, W in enumerate(weights):
            if W.ndim != 2 or W.shape[1] != sizes[-1]:
                raise InvalidTopology(
                    f"weight {idx} has shape {W.shape}, expected (*, {sizes[-1]})"
                )
            sizes.append(W.shape[0])
        net = cls(sizes, rng=np.random.default_rng(0), activation=activation, ops=ops)
        net.weights = weights
        net.biases = [
            as_column(np.array(b, dtype=np.float64), sizes[idx + 1], what=f"bias {idx}")
            for idx, b in enumerate(biases)
        ]
        return net

    @property
    def num_layers(self) -> int:
        """Number of weight/bias layers (``len(sizes) - 1``)."""

        return len(self.weights)

    def parameter_count(self) -> int:
        return int(sum(W.size + b.size for W, b in zip(self.weights, self.biases)))

    def parameters(self) -> Mapping[str, Array]:
        """Copies of every parameter keyed ``W{i}`` / ``b{i}``."""

        params: dict[str, Array] = {}
        for idx, (W, b) in enumerate(zip(self.weights, self.biases)):
            params[f"W{idx}"] = W.copy()
            params[f"b{idx}"] = b.copy()
        return params

    def forward(self, x: Array) -> ActivationTrace:
        """Run ``x`` through every layer and return the full trace."""

        ops = self.ops
        a = as_column(x, self.sizes[0])
        activations = [a]
        weighted_sums: list[Array] = []
        for W, b in zip(self.weights, self.biases):
            # z[l] = W[l]·a[l-1] + b[l]
            z = ops.add(ops.matmul(W, a), b)
            a = ops.apply(self._activation.fn, z)
            weighted_sums.append(z)
            activations.append(a)
        return ActivationTrace(activations=activations, weighted_sums=weighted_sums)

    def predict(self, x: Array) -> Array:
        """Return the output-layer activation for ``x``."""

        return self.forward(x).output

    def activation_derivative(self, z: Array) -> Array:
        return self.ops.apply(self._activation.derivative, z)

    def apply_gradients(self, step: Gradients) -> None:
        """Subtract an already scaled gradient step from every parameter in place.

        All shapes are checked before the first write, so a mismatched step
        leaves the network untouched.
        """

        if len(step) != self.num_layers or len(step.biases) != self.num_layers:
            raise ShapeMismatch(
                f"step has {len(step)} weight and {len(step.biases)} bias layers, "
                f"network has {self.num_layers}"
            )
        for W, dW in zip(self.weights, step.weights):
            if W.shape != dW.shape:
                raise ShapeMismatch(f"weight step of shape {dW.shape}, expected {W.shape}")
        for b, db in zip(self.biases, step.biases):
            if b.shape != db.shape:
                raise ShapeMismatch(f"bias step of shape {db.shape}, expected {b.shape}")
        ops = self.ops
        for W, dW in zip(self.weights, step.weights):
            ops.isub(W, dW)
        for b, db in zip(self.biases, step.biases):
            ops.isub(b, db)


__all__ = ["Network", "as_column"]
