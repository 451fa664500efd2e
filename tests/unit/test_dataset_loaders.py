import gzip

import numpy as np
import pytest

from mlpnet.core.errors import ShapeMismatch
from mlpnet.data import mnist
from mlpnet.data.registry import available_datasets, get_dataset
from mlpnet.data.utils import normalize, one_hot, to_dataset


def _write_pair(directory, images_name, labels_name, images, labels):
    mnist.write_image_file(directory / images_name, images)
    mnist.write_label_file(directory / labels_name, labels)


def test_idx_files_round_trip(tmp_path):
    images = np.arange(3 * 784, dtype=np.uint32).reshape(3, 28, 28) % 256
    labels = np.array([7, 0, 9])
    mnist.write_image_file(tmp_path / "images.gz", images)
    mnist.write_label_file(tmp_path / "labels.gz", labels)

    loaded = mnist.load_image_file(tmp_path / "images.gz")
    assert loaded.shape == (3, 784)
    assert loaded.dtype == np.uint8
    assert np.array_equal(loaded, images.reshape(3, 784))
    assert mnist.load_label_file(tmp_path / "labels.gz").tolist() == [7, 0, 9]


def test_header_is_big_endian(tmp_path):
    path = mnist.write_label_file(tmp_path / "labels.gz", [1, 2])
    with gzip.open(path, "rb") as handle:
        header = handle.read(8)
    assert header == bytes([0, 0, 8, 1, 0, 0, 0, 2])


def test_uncompressed_files_are_read(tmp_path):
    mnist.write_label_file(tmp_path / "labels.idx", [4, 5, 6])
    assert mnist.load_label_file(tmp_path / "labels.idx").tolist() == [4, 5, 6]


def test_bad_magic_is_rejected(tmp_path):
    labels_path = mnist.write_label_file(tmp_path / "labels.gz", [1])
    with pytest.raises(mnist.MnistFormatError):
        mnist.load_image_file(labels_path)

    images_path = mnist.write_image_file(tmp_path / "images.gz", np.zeros((1, 784)))
    with pytest.raises(mnist.MnistFormatError):
        mnist.load_label_file(images_path)


def test_wrong_dimensions_are_rejected(tmp_path):
    path = tmp_path / "images.gz"
    header = np.array([mnist.IMAGE_MAGIC, 1, 27, 28], dtype=">i4")
    with gzip.open(path, "wb") as handle:
        handle.write(header.tobytes())
        handle.write(bytes(27 * 28))
    with pytest.raises(mnist.MnistFormatError, match="rows=27"):
        mnist.load_image_file(path)


def test_truncated_payload_is_rejected(tmp_path):
    path = tmp_path / "labels.gz"
    header = np.array([mnist.LABEL_MAGIC, 5], dtype=">i4")
    with gzip.open(path, "wb") as handle:
        handle.write(header.tobytes())
        handle.write(bytes([1, 2]))
    with pytest.raises(mnist.MnistFormatError, match="truncated"):
        mnist.load_label_file(path)


def test_load_checks_counts(tmp_path):
    _write_pair(
        tmp_path,
        mnist.TRAINING_IMAGE_FILE,
        mnist.TRAINING_LABEL_FILE,
        np.zeros((2, 784)),
        [1, 2, 3],
    )
    _write_pair(tmp_path, mnist.TEST_IMAGE_FILE, mnist.TEST_LABEL_FILE, np.zeros((1, 784)), [0])
    with pytest.raises(mnist.MnistFormatError, match="training size mismatch"):
        mnist.load(tmp_path)


def test_fixture_loads_as_mnist(tmp_path):
    mnist.build_fixture(tmp_path, train_items=20, test_items=10)
    training, test = mnist.load(tmp_path)
    assert len(training) == 20 and len(test) == 10
    image, label = training.get(3)
    assert image.shape == (28, 28)
    assert label == 3
    assert np.all(image[4 + 2 * label, 4:24] == 255)


def test_preparation_helpers():
    assert np.array_equal(normalize(np.array([0, 51, 255], dtype=np.uint8)), [0.0, 0.2, 1.0])
    encoded = one_hot(np.array([2, 0]), 3)
    assert encoded.tolist() == [[0.0, 0.0, 1.0], [1.0, 0.0, 0.0]]
    with pytest.raises(ValueError):
        one_hot(np.array([3]), 3)

    data = to_dataset(np.full((2, 784), 255, dtype=np.uint8), np.array([4, 9]))
    assert len(data) == 2
    x, y = next(iter(data))
    assert x.shape == (784, 1) and np.all(x == 1.0)
    assert y.shape == (10, 1) and y[4, 0] == 1.0 and y.sum() == 1.0
    with pytest.raises(ShapeMismatch):
        to_dataset(np.zeros((2, 784)), np.array([1]))


def test_registry_lists_builtins():
    assert {"mnist", "mnist_fixture", "blobs"} <= set(available_datasets())
    with pytest.raises(KeyError):
        get_dataset("cifar")


def test_mnist_fixture_dataset(tmp_path):
    spec = get_dataset("mnist_fixture", cache_dir=tmp_path, train_items=40, test_items=12, val_items=8)
    assert spec.splits == {"train": 32, "val": 8, "test": 12}
    assert spec.d_in == 784 and spec.num_classes == 10
    assert spec.provenance["source"] == "fixture"


def test_mnist_dataset_slices(tmp_path):
    mnist.build_fixture(tmp_path, train_items=30, test_items=10)
    spec = get_dataset("mnist", data_dir=tmp_path, train_items=12, val_start=25, test_items=4)
    assert spec.splits == {"train": 12, "val": 5, "test": 4}


def test_blobs_dataset():
    spec = get_dataset("blobs", n=100, classes=3, seed=1)
    assert spec.splits == {"train": 60, "val": 20, "test": 20}
    x, y = next(iter(spec.train))
    assert x.shape == (2, 1) and y.shape == (3, 1)
