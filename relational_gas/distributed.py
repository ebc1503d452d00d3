"""
Prototype-sharded relational neural gas across cooperating processes

Every process holds the full dissimilarity matrix and a disjoint shard of the
prototypes. All cross-process traffic goes through a ClusterCoordinator, whose
methods are collective: every process must issue the same calls in the same
order, whatever the size of its local shard, or the group deadlocks.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

import numpy as np
import structlog

from .config import RNGConfig
from .core import RelationalNeuralGas, TrainingHistory
from .callbacks import Callback
from .exceptions import PreconditionViolationError
from .neighborhood import NeighborhoodRanker
from .relational import RelationalDistance

logger = structlog.get_logger(__name__)


class ClusterCoordinator(ABC):
    """Collective operations shared by all processes of a training group"""

    @property
    @abstractmethod
    def rank(self) -> int:
        pass

    @property
    @abstractmethod
    def size(self) -> int:
        pass

    @abstractmethod
    def all_reduce_sum(self, value: Any) -> Any:
        """Sum of value over all processes, returned on every process"""

    @abstractmethod
    def all_gather(self, value: Any) -> List[Any]:
        """Values of all processes ordered by process rank"""


class LocalCoordinator(ClusterCoordinator):
    """Single-process group"""

    @property
    def rank(self) -> int:
        return 0

    @property
    def size(self) -> int:
        return 1

    def all_reduce_sum(self, value: Any) -> Any:
        return value

    def all_gather(self, value: Any) -> List[Any]:
        return [value]


class CommunicatorCoordinator(ClusterCoordinator):
    """
    Adapter for an mpi4py-style communicator

    Any object exposing Get_rank(), Get_size(), allreduce(obj) (summing by
    default) and allgather(obj) works, e.g. mpi4py.MPI.COMM_WORLD.
    """

    def __init__(self, communicator: Any):
        self.communicator = communicator

    @property
    def rank(self) -> int:
        return self.communicator.Get_rank()

    @property
    def size(self) -> int:
        return self.communicator.Get_size()

    def all_reduce_sum(self, value: Any) -> Any:
        return self.communicator.allreduce(value)

    def all_gather(self, value: Any) -> List[Any]:
        return list(self.communicator.allgather(value))


class DistributedRelationalNeuralGas(RelationalNeuralGas):
    """
    Relational neural gas whose prototypes are split over processes

    ``config.n_prototypes`` is the size of the local shard and may be zero.
    Ranking and quantization error are computed over the gathered global
    adaptation matrix, so the group as a whole follows the same trajectory
    as a single process holding all shards stacked in rank order.
    """

    def __init__(
        self,
        config: RNGConfig,
        coordinator: Optional[ClusterCoordinator] = None,
        verbose: bool = False,
        ranker: Optional[NeighborhoodRanker] = None,
    ):
        self.coordinator = coordinator if coordinator is not None else LocalCoordinator()
        super().__init__(config, verbose=verbose, ranker=ranker)
        self._shard: Optional[Tuple[int, int]] = None

    def total_prototype_count(self) -> int:
        """Sum of the local shard sizes of all processes"""
        return int(self.coordinator.all_reduce_sum(self.n_prototypes))

    def default_lambda(self) -> float:
        """
        Half the global prototype count

        config.initial_lambda describes the local shard and is not used here.
        A process whose own shard is empty still anneals with 0.5 * global K.
        Falls back to the dtype's epsilon when the group owns no prototypes,
        so the lambda check never rejects a call that fails for another reason.
        """
        total = self.total_prototype_count()
        if total == 0:
            return float(np.finfo(self.config.dtype).eps)
        return 0.5 * total

    def _shard_range(self) -> Tuple[int, int]:
        """Row range of the local shard inside the global prototype matrix"""
        counts = self.coordinator.all_gather(self.n_prototypes)
        offset = int(sum(counts[: self.coordinator.rank]))
        return offset, offset + self.n_prototypes

    def _gather_rows(self, matrix: np.ndarray) -> np.ndarray:
        return np.vstack(self.coordinator.all_gather(matrix))

    def train(
        self,
        data: np.ndarray,
        n_iterations: Optional[int] = None,
        lambda_: Optional[float] = None,
        callbacks: Optional[List[Callback]] = None,
    ) -> TrainingHistory:
        self._shard = self._shard_range()
        logger.debug(
            "Shard layout",
            process=self.coordinator.rank,
            processes=self.coordinator.size,
            shard=self._shard,
        )
        try:
            return super().train(data, n_iterations, lambda_, callbacks)
        finally:
            self._shard = None

    def _rank_adaptation(self, adaptation: np.ndarray) -> Tuple[float, np.ndarray]:
        start, stop = self._shard
        global_adaptation = self._gather_rows(adaptation)
        qe = RelationalDistance.quantization_error(global_adaptation)
        ranks = self.ranker.rank_columns(global_adaptation)
        return qe, ranks[start:stop]

    def use(self, data: np.ndarray) -> np.ndarray:
        """Global index of the nearest prototype for every object"""
        data = self._as_matrix(data)
        self._check_assignable(data)

        distances = RelationalDistance.raw(self.prototypes.coefficients, data)
        return RelationalDistance.nearest(self._gather_rows(distances))

    def quantization_error(self, data: np.ndarray) -> float:
        data = self._as_matrix(data)
        self._check_assignable(data)
        if data.shape[0] != data.shape[1]:
            raise PreconditionViolationError(
                f"matrix must be square, got {data.shape[0]}x{data.shape[1]}", self
            )

        adaptation = RelationalDistance.adaptation(self.prototypes.coefficients, data)
        return RelationalDistance.quantization_error(self._gather_rows(adaptation))
