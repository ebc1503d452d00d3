"""
Core relational neural gas implementation
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any, Tuple

import numpy as np
import structlog
from tqdm import tqdm

from .config import RNGConfig
from .callbacks import Callback
from .exceptions import PreconditionViolationError
from .neighborhood import NeighborhoodRanker, get_ranker
from .prototypes import PrototypeSet
from .relational import RelationalDistance

logger = structlog.get_logger(__name__)


@dataclass
class TrainingHistory:
    """Per-iteration record of one train() call, filled only when logging is on"""

    prototypes: List[np.ndarray] = field(default_factory=list)
    quantization_errors: List[float] = field(default_factory=list)
    lambdas: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.quantization_errors)


class RelationalNeuralGas:
    """
    Batch relational neural gas

    Clusters N objects given only by an N x N dissimilarity matrix. Every
    prototype is a convex combination of the objects; training anneals a
    rank-based neighborhood so that each prototype is pulled towards the
    objects it is closest to.
    """

    def __init__(
        self,
        config: RNGConfig,
        verbose: bool = False,
        ranker: Optional[NeighborhoodRanker] = None,
    ):
        """
        Initialize the prototypes

        Args:
            config: RNGConfig object with all parameters
            verbose: Whether to show a progress bar during training
            ranker: Neighborhood ranking strategy, taken from the config if None
        """
        self.config = config
        self.verbose = verbose

        if config.seed is not None:
            self.rng = np.random.RandomState(config.seed)
        else:
            self.rng = np.random.RandomState()

        self.prototypes = PrototypeSet(
            config.n_prototypes,
            config.n_objects,
            rng=self.rng,
            zero_tolerance=config.zero_tolerance,
            dtype=config.dtype,
        )
        self.ranker = ranker if ranker is not None else get_ranker(config.neighborhood)

        # Replaced on every train() call
        self.history = TrainingHistory()

        self.metadata = {
            "creation_time": datetime.now().isoformat(),
            "total_iterations": 0,
            "training_runs": 0,
            "last_quantization_error": None,
            "config": config.to_dict(),
        }

        self.callbacks: List[Callback] = []

        # Control flag for early stopping
        self.stop_training = False

    @property
    def n_prototypes(self) -> int:
        return self.prototypes.n_prototypes

    @property
    def n_objects(self) -> int:
        return self.prototypes.n_objects

    @property
    def logging(self) -> bool:
        return self.config.logging

    @logging.setter
    def logging(self, enabled: bool) -> None:
        self.config.logging = bool(enabled)

    def get_prototypes(self) -> np.ndarray:
        """Copy of the prototype coefficient matrix (K x N)"""
        return self.prototypes.snapshot()

    def get_logged_prototypes(self) -> List[np.ndarray]:
        return list(self.history.prototypes)

    def get_logged_quantization_error(self) -> List[float]:
        return list(self.history.quantization_errors)

    def _as_matrix(self, data: np.ndarray) -> np.ndarray:
        if not isinstance(data, np.ndarray):
            data = np.asarray(data)

        if data.ndim != 2:
            raise PreconditionViolationError(
                f"relational data must be a 2D matrix, got {data.ndim}D", self
            )

        data = data.astype(self.config.dtype, copy=False)
        if not np.all(np.isfinite(data)):
            raise PreconditionViolationError(
                "relational data contains NaN or infinite values", self
            )
        return data

    def total_prototype_count(self) -> int:
        """Number of prototypes taking part in training"""
        return self.n_prototypes

    def _check_training(
        self, data: np.ndarray, n_iterations: int, lambda_: float
    ) -> None:
        n_total = self.total_prototype_count()
        if n_total == 0:
            raise PreconditionViolationError(
                "number of prototypes must be greater than zero", self
            )
        if data.shape[0] < n_total:
            raise PreconditionViolationError(
                "number of datapoints are less than prototypes", self
            )
        if n_iterations <= 0:
            raise PreconditionViolationError(
                "iterations must be greater than zero", self
            )
        if data.shape[1] != self.n_objects:
            raise PreconditionViolationError(
                f"data and prototype dimension are not equal "
                f"({data.shape[1]} != {self.n_objects})",
                self,
            )
        if not (lambda_ > 0 and np.isfinite(lambda_)):
            raise PreconditionViolationError(
                f"lambda must be a finite number greater than zero, got {lambda_}", self
            )
        if data.shape[0] != data.shape[1]:
            raise PreconditionViolationError(
                f"matrix must be square, got {data.shape[0]}x{data.shape[1]}", self
            )
        final_lambda = self.config.final_lambda
        if not (final_lambda > 0 and np.isfinite(final_lambda)):
            raise PreconditionViolationError(
                f"final lambda must be a finite number greater than zero, got {final_lambda}",
                self,
            )

    def train(
        self,
        data: np.ndarray,
        n_iterations: Optional[int] = None,
        lambda_: Optional[float] = None,
        callbacks: Optional[List[Callback]] = None,
    ) -> TrainingHistory:
        """
        Train the prototypes on a square dissimilarity matrix

        Continues from the current prototypes; repeated calls do not reset them.

        Args:
            data: N x N dissimilarity matrix
            n_iterations: Number of iterations (uses config if None)
            lambda_: Initial neighborhood range (0.5 * K if None)
            callbacks: List of callback objects

        Returns:
            The history of this call, empty unless logging is enabled
        """
        data = self._as_matrix(data)

        if n_iterations is None:
            n_iterations = self.config.n_iterations
        if lambda_ is None:
            lambda_ = self.default_lambda()

        self._check_training(data, n_iterations, lambda_)

        history = TrainingHistory()
        self.history = history
        self.stop_training = False
        self.callbacks = callbacks or []

        logger.info(
            "Training started",
            n_prototypes=self.n_prototypes,
            n_objects=self.n_objects,
            n_iterations=n_iterations,
            initial_lambda=lambda_,
        )

        for callback in self.callbacks:
            callback.on_training_begin(self)

        iterations_completed = self._train_loop(data, n_iterations, lambda_, history)

        for callback in self.callbacks:
            callback.on_training_end(self)

        self.metadata["total_iterations"] += iterations_completed
        self.metadata["training_runs"] += 1
        self.metadata["last_training"] = datetime.now().isoformat()

        logger.info(
            "Training finished",
            iterations=iterations_completed,
            quantization_error=self.metadata["last_quantization_error"],
        )
        return history

    def fit(
        self,
        data: np.ndarray,
        n_iterations: Optional[int] = None,
        callbacks: Optional[List[Callback]] = None,
    ) -> "RelationalNeuralGas":
        """Train with the default lambda and return self for method chaining"""
        self.train(data, n_iterations, callbacks=callbacks)
        return self

    def default_lambda(self) -> float:
        return float(self.config.initial_lambda)

    def _train_loop(
        self,
        data: np.ndarray,
        n_iterations: int,
        lambda_: float,
        history: TrainingHistory,
    ) -> int:
        """Batch optimization, one full pass over all objects per iteration"""
        multiplier = self.config.final_lambda / lambda_

        iterator = range(n_iterations)
        if self.verbose:
            iterator = tqdm(iterator, desc="Training relational neural gas")

        iterations_completed = 0
        for i in iterator:
            for callback in self.callbacks:
                callback.on_iteration_begin(i, self)

            if self.stop_training:
                logger.info("Training stopped", iteration=i)
                break

            current_lambda = lambda_ * multiplier ** (i / n_iterations)

            adaptation = RelationalDistance.adaptation(
                self.prototypes.coefficients, data
            )
            qe, ranks = self._rank_adaptation(adaptation)

            if self.config.logging:
                history.quantization_errors.append(qe)
                history.lambdas.append(current_lambda)

            self.prototypes.replace(np.exp(-ranks / current_lambda))

            if self.config.logging:
                history.prototypes.append(self.prototypes.snapshot())

            if self.verbose:
                iterator.set_postfix({"QE": f"{qe:.4f}", "λ": f"{current_lambda:.4f}"})

            logger.debug("Iteration done", iteration=i, qe=qe, lambda_=current_lambda)

            self.metadata["last_quantization_error"] = qe
            metrics = {"qe": qe, "lambda": current_lambda}
            for callback in self.callbacks:
                callback.on_iteration_end(i, self, metrics)

            iterations_completed += 1

        return iterations_completed

    def _rank_adaptation(self, adaptation: np.ndarray) -> Tuple[float, np.ndarray]:
        """Quantization error and per-object prototype ranks of one iteration"""
        qe = RelationalDistance.quantization_error(adaptation)
        return qe, self.ranker.rank_columns(adaptation)

    def _check_assignable(self, data: np.ndarray) -> None:
        if self.total_prototype_count() == 0:
            raise PreconditionViolationError(
                "number of prototypes must be greater than zero", self
            )
        if data.shape[0] != self.n_objects:
            raise PreconditionViolationError(
                f"data and prototype dimension are not equal "
                f"({data.shape[0]} != {self.n_objects})",
                self,
            )

    def use(self, data: np.ndarray) -> np.ndarray:
        """
        Index of the nearest prototype for every object

        Args:
            data: N x M dissimilarities between the N reference objects (rows)
                and M objects to assign (columns)

        Returns:
            Integer array of length M with values in [0, K)
        """
        data = self._as_matrix(data)
        self._check_assignable(data)

        distances = RelationalDistance.raw(self.prototypes.coefficients, data)
        return RelationalDistance.nearest(distances)

    def predict(self, data: np.ndarray) -> np.ndarray:
        return self.use(data)

    def quantization_error(self, data: np.ndarray) -> float:
        """Quantization error of the current prototypes on a square matrix"""
        data = self._as_matrix(data)
        self._check_assignable(data)
        if data.shape[0] != data.shape[1]:
            raise PreconditionViolationError(
                f"matrix must be square, got {data.shape[0]}x{data.shape[1]}", self
            )

        adaptation = RelationalDistance.adaptation(self.prototypes.coefficients, data)
        return RelationalDistance.quantization_error(adaptation)

    def get_info(self) -> Dict[str, Any]:
        """Get comprehensive information about the model"""
        return {
            "config": self.config.to_dict(),
            "metadata": self.metadata,
            "shape": (self.n_prototypes, self.n_objects),
            "n_prototypes": self.n_prototypes,
            "n_objects": self.n_objects,
            "total_iterations": self.metadata["total_iterations"],
            "logging": self.logging,
        }
