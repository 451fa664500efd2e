"""Activation functions applied elementwise to layer outputs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid of ``x``."""

    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_prime(x: Array) -> Array:
    """Derivative of :func:`sigmoid` evaluated at ``x``."""

    s = sigmoid(x)
    return s * (1.0 - s)


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def relu_prime(x: Array) -> Array:
    return (x > 0).astype(np.float64)


def tanh(x: Array) -> Array:
    return np.tanh(x)


def tanh_prime(x: Array) -> Array:
    return 1.0 - np.tanh(x) ** 2


@dataclass(frozen=True)
class Activation:
    """An activation paired with its derivative."""

    name: str
    fn: Callable[[Array], Array]
    derivative: Callable[[Array], Array]

    def __call__(self, x: Array) -> Array:
        return self.fn(x)


ACTIVATIONS: Dict[str, Activation] = {
    "sigmoid": Activation("sigmoid", sigmoid, sigmoid_prime),
    "relu": Activation("relu", relu, relu_prime),
    "tanh": Activation("tanh", tanh, tanh_prime),
}


def get_activation(name: str) -> Activation:
    try:
        return ACTIVATIONS[name]
    except KeyError as exc:
        available = ", ".join(sorted(ACTIVATIONS))
        raise KeyError(f"Unknown activation {name!r}. Available: {available}") from exc


__all__ = [
    "Activation",
    "ACTIVATIONS",
    "get_activation",
    "sigmoid",
    "sigmoid_prime",
    "relu",
    "relu_prime",
    "tanh",
    "tanh_prime",
]
