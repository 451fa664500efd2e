"""Training loop, evaluation and end-to-end pipelines."""

from .metrics import count_correct, evaluate, mean_cost
from .trainer import SGDOptimizer, Trainer, TrainingHistory, gradient_descent, train

__all__ = [
    "SGDOptimizer",
    "Trainer",
    "TrainingHistory",
    "count_correct",
    "evaluate",
    "gradient_descent",
    "mean_cost",
    "train",
]
