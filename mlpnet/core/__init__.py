"""Core numerical primitives for mlpnet."""

from . import activations, backprop, errors, linalg, network, types

__all__ = ["activations", "backprop", "errors", "linalg", "network", "types"]
