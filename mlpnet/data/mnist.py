"""Reader and writer for the MNIST IDX files.

Each file starts with a big-endian int32 header. Image files carry
``magic=0x00000803, count, rows, cols`` followed by ``count * rows * cols``
unsigned bytes; label files carry ``magic=0x00000801, count`` followed by one
byte per label. Files ending in ``.gz`` are read through gzip.
"""

from __future__ import annotations

import gzip
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Tuple

import numpy as np

from ..core.errors import MLPError

WIDTH = 28
HEIGHT = 28

TRAINING_IMAGE_FILE = "train-images-idx3-ubyte.gz"
TRAINING_LABEL_FILE = "train-labels-idx1-ubyte.gz"
TEST_IMAGE_FILE = "t10k-images-idx3-ubyte.gz"
TEST_LABEL_FILE = "t10k-labels-idx1-ubyte.gz"

IMAGE_MAGIC = 0x00000803
LABEL_MAGIC = 0x00000801


class MnistFormatError(MLPError):
    """Raised when an IDX file does not match the MNIST layout."""


@dataclass(frozen=True)
class MnistSet:
    """Images paired with their labels.

    ``images`` is ``(n, HEIGHT * WIDTH)`` uint8 with 0 as background and 255
    as ink; ``labels`` is ``(n,)`` with digits 0-9.
    """

    images: np.ndarray
    labels: np.ndarray

    def __len__(self) -> int:
        return int(self.labels.shape[0])

    def get(self, index: int) -> tuple[np.ndarray, int]:
        return self.images[index].reshape(HEIGHT, WIDTH), int(self.labels[index])


def _open(path: Path, mode: str = "rb") -> BinaryIO:
    if path.suffix == ".gz":
        return gzip.open(path, mode)  # type: ignore[return-value]
    return path.open(mode)


def _read_header(handle: BinaryIO, fields: int, path: Path) -> list[int]:
    raw = handle.read(4 * fields)
    if len(raw) != 4 * fields:
        raise MnistFormatError(f"mnist: {path.name} is too short for its header")
    return [int(value) for value in np.frombuffer(raw, dtype=">i4")]


def _read_payload(handle: BinaryIO, size: int, path: Path) -> np.ndarray:
    raw = handle.read(size)
    if len(raw) != size:
        raise MnistFormatError(
            f"mnist: {path.name} is truncated, expected {size} bytes but read {len(raw)}"
        )
    return np.frombuffer(raw, dtype=np.uint8)


def load_image_file(path: str | Path) -> np.ndarray:
    """Parse an image file and return ``(n, HEIGHT * WIDTH)`` uint8 rows."""

    path = Path(path)
    with _open(path) as handle:
        magic, count, rows, cols = _read_header(handle, 4, path)
        if magic != IMAGE_MAGIC or rows != HEIGHT or cols != WIDTH:
            raise MnistFormatError(
                f"mnist: invalid format in {path.name} "
                f"(magic={magic:#010x}, rows={rows}, cols={cols})"
            )
        pixels = _read_payload(handle, int(count * rows * cols), path)
    return pixels.reshape(int(count), HEIGHT * WIDTH)


def load_label_file(path: str | Path) -> np.ndarray:
    """Parse a label file and return ``(n,)`` int64 labels."""

    path = Path(path)
    with _open(path) as handle:
        magic, count = _read_header(handle, 2, path)
        if magic != LABEL_MAGIC:
            raise MnistFormatError(
                f"mnist: invalid format in {path.name} (magic={magic:#010x})"
            )
        labels = _read_payload(handle, int(count), path)
    return labels.astype(np.int64)


def _load_set(directory: Path, images_name: str, labels_name: str, split: str) -> MnistSet:
    images = load_image_file(directory / images_name)
    labels = load_label_file(directory / labels_name)
    if images.shape[0] != labels.shape[0]:
        raise MnistFormatError(
            f"mnist: {split} size mismatch ({images.shape[0]} images, {labels.shape[0]} labels)"
        )
    return MnistSet(images=images, labels=labels)


def load(directory: str | Path) -> Tuple[MnistSet, MnistSet]:
    """Load the training and test sets from ``directory``."""

    directory = Path(directory)
    training = _load_set(directory, TRAINING_IMAGE_FILE, TRAINING_LABEL_FILE, "training")
    test = _load_set(directory, TEST_IMAGE_FILE, TEST_LABEL_FILE, "test")
    return training, test


def write_image_file(path: str | Path, images: np.ndarray) -> Path:
    """Write ``(n, HEIGHT * WIDTH)`` or ``(n, HEIGHT, WIDTH)`` bytes as IDX."""

    path = Path(path)
    images = np.asarray(images, dtype=np.uint8).reshape(-1, HEIGHT * WIDTH)
    header = np.array([IMAGE_MAGIC, images.shape[0], HEIGHT, WIDTH], dtype=">i4")
    path.parent.mkdir(parents=True, exist_ok=True)
    with _open(path, "wb") as handle:
        handle.write(header.tobytes())
        handle.write(images.tobytes())
    return path


def write_label_file(path: str | Path, labels: np.ndarray) -> Path:
    path = Path(path)
    labels = np.asarray(labels, dtype=np.uint8).reshape(-1)
    header = np.array([LABEL_MAGIC, labels.shape[0]], dtype=">i4")
    path.parent.mkdir(parents=True, exist_ok=True)
    with _open(path, "wb") as handle:
        handle.write(header.tobytes())
        handle.write(labels.tobytes())
    return path


def _fixture_images(labels: np.ndarray, offset: int) -> np.ndarray:
    # Procedural rather than random so the archive is identical everywhere.
    count = labels.shape[0]
    base = (np.arange(count * HEIGHT * WIDTH, dtype=np.uint32) + offset) % 61
    images = base.reshape(count, HEIGHT, WIDTH).astype(np.uint8)
    for idx, label in enumerate(labels):
        row = 4 + 2 * int(label)
        images[idx, row : row + 2, 4:24] = 255
    return images


def build_fixture(directory: str | Path, train_items: int = 256, test_items: int = 64) -> Path:
    """Write a small deterministic MNIST look-alike into ``directory``.

    Every digit ``k`` is drawn as a bright horizontal bar at row ``4 + 2k``
    over a fixed texture, so the classes are separable.
    """

    directory = Path(directory)
    train_labels = np.arange(train_items, dtype=np.uint8) % 10
    test_labels = np.arange(test_items, dtype=np.uint8)[::-1] % 10
    write_image_file(directory / TRAINING_IMAGE_FILE, _fixture_images(train_labels, 0))
    write_label_file(directory / TRAINING_LABEL_FILE, train_labels)
    write_image_file(directory / TEST_IMAGE_FILE, _fixture_images(test_labels, 7))
    write_label_file(directory / TEST_LABEL_FILE, test_labels)
    return directory


__all__ = [
    "MnistFormatError",
    "MnistSet",
    "load",
    "load_image_file",
    "load_label_file",
    "write_image_file",
    "write_label_file",
    "build_fixture",
]
