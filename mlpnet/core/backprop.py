"""Backpropagation of the quadratic cost through a :class:`Network`."""

from __future__ import annotations

from typing import List

from .linalg import outer
from .network import Network, as_column
from .types import Array, Gradients


def quadratic_cost(output: Array, target: Array) -> float:
    """Return ``½‖output − target‖²``."""

    diff = output - target
    return float(0.5 * (diff * diff).sum())


def backward(network: Network, x: Array, y: Array) -> Gradients:
    """Return dC/dW and dC/dB for one sample, front layer first.

    Cost: C = ½‖a[L] − y‖², with a[l] = σ(z[l]) and z[l] = W[l]·a[l-1] + b[l].
    The network is only read.
    """

    ops = network.ops
    y = as_column(y, network.sizes[-1], what="target")
    trace = network.forward(x)
    a, z = trace.activations, trace.weighted_sums
    last = network.num_layers - 1

    dW: List[Array] = [None] * network.num_layers  # type: ignore[list-item]
    dB: List[Array] = [None] * network.num_layers  # type: ignore[list-item]

    # delta = dC/dz[L] = (a[L] − y) ⊙ σ'(z[L])
    delta = ops.hadamard(ops.sub(a[-1], y), network.activation_derivative(z[last]))
    dB[last] = delta
    dW[last] = outer(ops, delta, a[last])

    # a[] includes the input layer, so a[idx] feeds weights[idx]
    for idx in reversed(range(last)):
        delta = ops.hadamard(
            ops.matmul(ops.transpose(network.weights[idx + 1]), delta),
            network.activation_derivative(z[idx]),
        )
        dB[idx] = delta
        dW[idx] = outer(ops, delta, a[idx])

    return Gradients(weights=dW, biases=dB)


__all__ = ["backward", "quadratic_cost"]
