"""
Neighborhood ranking strategies used by the training loop
"""

from abc import ABC, abstractmethod
from typing import Dict, Type, Union

import numpy as np

from .config import NeighborhoodStrategy
from .exceptions import UnknownConfigurationError


class NeighborhoodRanker(ABC):
    """Abstract base class for per-object prototype ranking"""

    @abstractmethod
    def rank(self, distances: np.ndarray) -> np.ndarray:
        """
        Rank prototype distances for one object

        Args:
            distances: Vector of length K with adapted distances

        Returns:
            Integer vector of length K, a permutation of 0..K-1 where
            0 marks the closest prototype
        """

    def rank_columns(self, distances: np.ndarray) -> np.ndarray:
        """Rank every column of a K x N matrix independently"""
        ranks = np.empty(distances.shape, dtype=np.intp)
        for j in range(distances.shape[1]):
            ranks[:, j] = self.rank(distances[:, j])
        return ranks


class ExactRanking(NeighborhoodRanker):
    """Full ascending ranking, ties resolved by lowest index"""

    def rank(self, distances: np.ndarray) -> np.ndarray:
        order = np.argsort(distances, kind="stable")
        ranks = np.empty_like(order)
        ranks[order] = np.arange(len(order))
        return ranks

    def rank_columns(self, distances: np.ndarray) -> np.ndarray:
        order = np.argsort(distances, axis=0, kind="stable")
        positions = np.broadcast_to(
            np.arange(distances.shape[0])[:, np.newaxis], order.shape
        )
        ranks = np.empty_like(order)
        np.put_along_axis(ranks, order, positions, axis=0)
        return ranks


_RANKERS: Dict[NeighborhoodStrategy, Type[NeighborhoodRanker]] = {
    NeighborhoodStrategy.EXACT: ExactRanking,
}


def get_ranker(strategy: Union[str, NeighborhoodStrategy]) -> NeighborhoodRanker:
    """Look up a ranker by strategy name or enum member"""
    if isinstance(strategy, str):
        try:
            strategy = NeighborhoodStrategy(strategy)
        except ValueError:
            raise UnknownConfigurationError(
                f"unknown neighborhood strategy: {strategy!r}"
            ) from None
    if strategy not in _RANKERS:
        raise UnknownConfigurationError(
            f"no ranker registered for neighborhood strategy: {strategy!r}"
        )
    return _RANKERS[strategy]()
