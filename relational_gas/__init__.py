"""
Relational Neural Gas Package

Batch relational neural gas: prototype-based clustering of objects that are
known only through their pairwise dissimilarities.
"""

from .core import RelationalNeuralGas, TrainingHistory
from .config import RNGConfig, NeighborhoodStrategy
from .prototypes import PrototypeSet
from .relational import RelationalDistance, is_numerical_zero, row_normalize
from .neighborhood import NeighborhoodRanker, ExactRanking, get_ranker
from .callbacks import Callback, EarlyStoppingCallback
from .distributed import (
    ClusterCoordinator,
    LocalCoordinator,
    CommunicatorCoordinator,
    DistributedRelationalNeuralGas,
)
from .exceptions import (
    RelationalGasError,
    InvalidConstructionError,
    PreconditionViolationError,
    UnknownConfigurationError,
)
from .observability import (
    setup_logging,
    trace_operation,
    get_metrics,
    get_health_status,
    log_training_metrics,
    log_assignment_metrics,
    update_active_models_count,
    RequestTracingMiddleware,
)

__version__ = "0.1.0"

__all__ = [
    "RelationalNeuralGas",
    "TrainingHistory",
    "RNGConfig",
    "NeighborhoodStrategy",
    "PrototypeSet",
    "RelationalDistance",
    "is_numerical_zero",
    "row_normalize",
    "NeighborhoodRanker",
    "ExactRanking",
    "get_ranker",
    "Callback",
    "EarlyStoppingCallback",
    "ClusterCoordinator",
    "LocalCoordinator",
    "CommunicatorCoordinator",
    "DistributedRelationalNeuralGas",
    "RelationalGasError",
    "InvalidConstructionError",
    "PreconditionViolationError",
    "UnknownConfigurationError",
    "setup_logging",
    "trace_operation",
    "get_metrics",
    "get_health_status",
    "log_training_metrics",
    "log_assignment_metrics",
    "update_active_models_count",
    "RequestTracingMiddleware",
]
