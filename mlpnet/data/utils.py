"""Turn raw bytes and integer labels into network-ready column vectors."""

from __future__ import annotations

import numpy as np

from ..core.errors import ShapeMismatch
from ..core.types import DataSet


def normalize(images: np.ndarray) -> np.ndarray:
    """Scale unsigned byte intensities into ``[0, 1]``."""

    return np.asarray(images, dtype=np.float64) / 255.0


def one_hot(labels: np.ndarray, num_classes: int) -> np.ndarray:
    """Return ``(n, num_classes)`` rows with a single 1 at each label."""

    labels = np.asarray(labels).reshape(-1).astype(int)
    if labels.size and (labels.min() < 0 or labels.max() >= num_classes):
        raise ValueError(f"labels must lie in [0, {num_classes}), got {labels.min()}..{labels.max()}")
    eye = np.eye(num_classes, dtype=np.float64)
    return eye[labels]


def to_dataset(images: np.ndarray, labels: np.ndarray, num_classes: int = 10) -> DataSet:
    """Normalise ``images``, one-hot ``labels`` and pair them up."""

    images = np.asarray(images)
    labels = np.asarray(labels)
    if images.shape[0] != labels.shape[0]:
        raise ShapeMismatch(f"{images.shape[0]} images but {labels.shape[0]} labels")
    flat = normalize(images).reshape(images.shape[0], -1)
    return DataSet.from_arrays(flat, one_hot(labels, num_classes))


def make_blobs(
    n: int = 200,
    d: int = 2,
    classes: int = 2,
    *,
    spread: float = 0.3,
    seed: int = 0,
) -> tuple[np.ndarray, np.ndarray]:
    """Gaussian clusters around centres spaced evenly on a circle of radius 2."""

    if d < 2:
        raise ValueError("make_blobs needs at least two input dimensions")
    rng = np.random.default_rng(seed)
    angles = 2.0 * np.pi * np.arange(classes) / classes
    centres = np.zeros((classes, d))
    centres[:, 0] = 2.0 * np.cos(angles)
    centres[:, 1] = 2.0 * np.sin(angles)
    labels = np.arange(n, dtype=np.int64) % classes
    points = centres[labels] + spread * rng.standard_normal((n, d))
    order = rng.permutation(n)
    return points[order], labels[order]


__all__ = ["normalize", "one_hot", "to_dataset", "make_blobs"]
