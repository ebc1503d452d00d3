"""
Callback system for monitoring and intervention during relational neural gas training
"""

from abc import ABC, abstractmethod
from typing import Dict, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from .core import RelationalNeuralGas

logger = structlog.get_logger(__name__)


class Callback(ABC):
    """Abstract base class for callbacks"""

    @abstractmethod
    def on_iteration_begin(self, iteration: int, model: "RelationalNeuralGas") -> None:
        pass

    @abstractmethod
    def on_iteration_end(
        self, iteration: int, model: "RelationalNeuralGas", metrics: Dict
    ) -> None:
        pass

    @abstractmethod
    def on_training_begin(self, model: "RelationalNeuralGas") -> None:
        pass

    @abstractmethod
    def on_training_end(self, model: "RelationalNeuralGas") -> None:
        pass


class EarlyStoppingCallback(Callback):
    """Stop training once a monitored metric stops improving"""

    def __init__(
        self, monitor: str = "qe", patience: int = 10, min_delta: float = 1e-4
    ):
        self.monitor = monitor
        self.patience = patience
        self.min_delta = min_delta
        self.best_value = float("inf")
        self.wait = 0

    def on_iteration_begin(self, iteration: int, model: "RelationalNeuralGas") -> None:
        pass

    def on_iteration_end(
        self, iteration: int, model: "RelationalNeuralGas", metrics: Dict
    ) -> None:
        current_value = metrics.get(self.monitor, float("inf"))
        if current_value < self.best_value - self.min_delta:
            self.best_value = current_value
            self.wait = 0
        else:
            self.wait += 1
            if self.wait >= self.patience:
                model.stop_training = True
                logger.info(
                    "Early stopping triggered",
                    iteration=iteration,
                    monitor=self.monitor,
                    best_value=self.best_value,
                )

    def on_training_begin(self, model: "RelationalNeuralGas") -> None:
        self.best_value = float("inf")
        self.wait = 0

    def on_training_end(self, model: "RelationalNeuralGas") -> None:
        pass
