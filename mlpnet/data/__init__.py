"""Dataset registry, MNIST reader and preparation helpers."""

from .registry import (
    DatasetSpec,
    available_datasets,
    get_dataset,
    register_dataset,
)

__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
