"""Dataset registry and metadata contracts."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, MutableMapping

from ..core.types import DataSet
from . import mnist
from .utils import make_blobs, one_hot, to_dataset

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "mlpnet"


@dataclass(frozen=True)
class DatasetSpec:
    """Prepared splits of a registered dataset.

    Attributes
    ----------
    train, validation, test:
        Column-vector data sets ready for the network. ``validation`` and
        ``test`` may be empty.
    d_in, num_classes:
        Input width and number of one-hot classes; a network fed by this
        dataset needs ``sizes[0] == d_in`` and ``sizes[-1] == num_classes``.
    provenance:
        Where the samples came from, recorded in the run manifest.
    """

    name: str
    train: DataSet
    validation: DataSet
    test: DataSet
    d_in: int
    num_classes: int
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def splits(self) -> Dict[str, int]:
        return {
            "train": len(self.train),
            "val": len(self.validation),
            "test": len(self.test),
        }


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(name: str | None = None) -> Callable[[DatasetFactory], DatasetFactory]:
    """Register a dataset factory under ``name``::

        @register_dataset("mnist")
        def make_mnist(**options):
            ...
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    return _decorator


def get_dataset(name: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` built by the factory for ``name``."""

    if name not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}")
    spec = _REGISTRY[name](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def resolve_cache_dir(cache_dir: str | Path | None = None) -> Path:
    """Resolve the effective cache directory for generated datasets."""

    env_dir = os.environ.get("MLPNET_CACHE_DIR")
    base = Path(cache_dir or env_dir or DEFAULT_CACHE_DIR)
    base.mkdir(parents=True, exist_ok=True)
    return base


def _validate_spec(spec: DatasetSpec) -> None:
    if len(spec.train) == 0:
        raise ValueError(f"Dataset {spec.name!r} has an empty training split")
    if spec.num_classes < 2:
        raise ValueError(f"Dataset {spec.name!r} must have at least two classes")


def _from_mnist_sets(
    name: str,
    training: mnist.MnistSet,
    test: mnist.MnistSet,
    *,
    train_items: int | None,
    val_start: int | None,
    test_items: int | None,
    provenance: Dict[str, Any],
) -> DatasetSpec:
    train_end = len(training) if train_items is None else min(train_items, len(training))
    train = to_dataset(training.images[:train_end], training.labels[:train_end])
    if val_start is None or val_start >= len(training):
        validation = DataSet(inputs=[], targets=[])
    else:
        validation = to_dataset(training.images[val_start:], training.labels[val_start:])
    test_end = len(test) if test_items is None else min(test_items, len(test))
    test_set = to_dataset(test.images[:test_end], test.labels[:test_end])
    provenance = dict(provenance)
    provenance.update(
        {"train_items": train_end, "val_start": val_start, "test_items": test_end}
    )
    return DatasetSpec(
        name=name,
        train=train,
        validation=validation,
        test=test_set,
        d_in=mnist.HEIGHT * mnist.WIDTH,
        num_classes=10,
        provenance=provenance,
    )


@register_dataset("mnist")
def build_mnist(
    *,
    data_dir: str | Path = "data",
    train_items: int | None = 30000,
    val_start: int | None = 59000,
    test_items: int | None = None,
    **_: object,
) -> DatasetSpec:
    """MNIST read from the four IDX files under ``data_dir``.

    The defaults train on the first 30000 training images and validate on
    the training images from index 59000 onwards.
    """

    training, test = mnist.load(data_dir)
    return _from_mnist_sets(
        "mnist",
        training,
        test,
        train_items=train_items,
        val_start=val_start,
        test_items=test_items,
        provenance={"source": "idx", "data_dir": str(data_dir)},
    )


@register_dataset("mnist_fixture")
def build_mnist_fixture(
    *,
    cache_dir: str | Path | None = None,
    train_items: int = 256,
    test_items: int = 64,
    val_items: int = 32,
    **_: object,
) -> DatasetSpec:
    """Offline MNIST look-alike written to the cache and read back as IDX."""

    root = resolve_cache_dir(cache_dir) / "mnist_fixture"
    mnist.build_fixture(root, train_items=train_items, test_items=test_items)
    training, test = mnist.load(root)
    return _from_mnist_sets(
        "mnist_fixture",
        training,
        test,
        train_items=train_items - val_items,
        val_start=train_items - val_items if val_items else None,
        test_items=None,
        provenance={"source": "fixture", "data_dir": str(root)},
    )


@register_dataset("blobs")
def build_blobs(
    *,
    n: int = 240,
    d: int = 2,
    classes: int = 2,
    spread: float = 0.3,
    seed: int = 0,
    val_split: float = 0.2,
    test_split: float = 0.2,
    **_: object,
) -> DatasetSpec:
    """Gaussian clusters split into train/validation/test by position."""

    if not 0 <= val_split < 1 or not 0 <= test_split < 1 or val_split + test_split >= 1:
        raise ValueError("val_split and test_split must lie in [0, 1) and sum to < 1")
    points, labels = make_blobs(n, d, classes, spread=spread, seed=seed)
    targets = one_hot(labels, classes)
    n_test = int(round(n * test_split))
    n_val = int(round(n * val_split))
    n_train = n - n_val - n_test
    full = DataSet.from_arrays(points, targets)
    return DatasetSpec(
        name="blobs",
        train=full[:n_train],
        validation=full[n_train : n_train + n_val],
        test=full[n_train + n_val :],
        d_in=d,
        num_classes=classes,
        provenance={
            "source": "synthetic",
            "n": n,
            "classes": classes,
            "spread": spread,
            "seed": seed,
        },
    )


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
    "resolve_cache_dir",
]
