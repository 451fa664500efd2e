import numpy as np
import pytest

from mlpnet.core.errors import EmptyDataSet
from mlpnet.core.network import Network
from mlpnet.core.types import DataSet
from mlpnet.training.metrics import count_correct, evaluate, mean_cost, summarize


def _identity_network() -> Network:
    # sigmoid is monotonic, so argmax(output) == argmax(input)
    return Network.from_parameters([np.eye(3)], [np.zeros((3, 1))])


def _dataset(rows, labels) -> DataSet:
    eye = np.eye(3)
    return DataSet.from_arrays(np.array(rows, dtype=float), eye[labels])


def test_evaluate_all_correct_is_one():
    data = _dataset([[5, 1, 0], [0, 2, 1], [0, 0, 9]], [0, 1, 2])
    assert evaluate(_identity_network(), data) == 1.0
    assert count_correct(_identity_network(), data) == 3


def test_evaluate_none_correct_is_zero():
    data = _dataset([[5, 1, 0], [0, 2, 1], [0, 0, 9]], [1, 2, 0])
    assert evaluate(_identity_network(), data) == 0.0


def test_evaluate_fraction():
    data = _dataset([[5, 1, 0], [0, 2, 1], [0, 0, 9], [1, 0, 0]], [0, 1, 0, 2])
    assert evaluate(_identity_network(), data) == 0.5


def test_empty_dataset_is_rejected():
    empty = DataSet(inputs=[], targets=[])
    with pytest.raises(EmptyDataSet):
        evaluate(_identity_network(), empty)
    with pytest.raises(EmptyDataSet):
        mean_cost(_identity_network(), empty)


def test_summarize_matches_individual_metrics():
    data = _dataset([[5, 1, 0], [0, 2, 1], [0, 0, 9], [1, 0, 0]], [0, 1, 0, 2])
    net = _identity_network()
    summary = summarize(net, data)
    assert summary.correct == 2
    assert summary.total == 4
    assert summary.accuracy == evaluate(net, data)
    assert summary.cost == pytest.approx(mean_cost(net, data))
    metrics = summary.as_metrics()
    assert set(metrics) == {"accuracy", "correct", "total", "cost"}
