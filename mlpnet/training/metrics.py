"""Classification metrics computed against a :class:`Network`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from ..core.backprop import quadratic_cost
from ..core.network import Network, as_column
from ..core.types import DataSet


@dataclass(frozen=True)
class Evaluation:
    correct: int
    total: int
    cost: float

    @property
    def accuracy(self) -> float:
        return self.correct / self.total

    def as_metrics(self) -> Dict[str, float]:
        return {
            "accuracy": float(self.accuracy),
            "correct": float(self.correct),
            "total": float(self.total),
            "cost": float(self.cost),
        }


def _is_match(network: Network, x, y) -> bool:
    ops = network.ops
    output = network.predict(x)
    target = as_column(y, network.sizes[-1], what="target")
    return ops.argmax(output) == ops.argmax(target)


def count_correct(network: Network, dataset: DataSet) -> int:
    """Number of samples whose predicted class equals the target's class.

    The class of a vector is the index of its largest entry; for one-hot
    targets that is the label.
    """

    return sum(1 for x, y in dataset if _is_match(network, x, y))


def evaluate(network: Network, dataset: DataSet) -> float:
    """Fraction of ``dataset`` classified correctly, in ``[0, 1]``."""

    dataset.require_samples("evaluation set")
    return count_correct(network, dataset) / len(dataset)


def mean_cost(network: Network, dataset: DataSet) -> float:
    """Average quadratic cost over ``dataset``."""

    dataset.require_samples("evaluation set")
    total = 0.0
    for x, y in dataset:
        target = as_column(y, network.sizes[-1], what="target")
        total += quadratic_cost(network.predict(x), target)
    return total / len(dataset)


def summarize(network: Network, dataset: DataSet) -> Evaluation:
    """Count matches and average the cost in a single pass."""

    dataset.require_samples("evaluation set")
    ops = network.ops
    correct = 0
    total_cost = 0.0
    for x, y in dataset:
        output = network.predict(x)
        target = as_column(y, network.sizes[-1], what="target")
        if ops.argmax(output) == ops.argmax(target):
            correct += 1
        total_cost += quadratic_cost(output, target)
    return Evaluation(correct=correct, total=len(dataset), cost=total_cost / len(dataset))


__all__ = ["Evaluation", "count_correct", "evaluate", "mean_cost", "summarize"]
