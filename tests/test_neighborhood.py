"""
Tests for neighborhood ranking strategies
"""

import pytest
import numpy as np
from relational_gas.config import NeighborhoodStrategy
from relational_gas.exceptions import UnknownConfigurationError
from relational_gas.neighborhood import (
    ExactRanking,
    NeighborhoodRanker,
    get_ranker,
)


class ReverseRanking(NeighborhoodRanker):
    """Ranks the farthest prototype first"""

    def rank(self, distances):
        return ExactRanking().rank(-distances)


@pytest.mark.unit
class TestExactRanking:
    """Test exact ranking"""

    @pytest.mark.unit
    def test_rank_vector(self):
        ranks = ExactRanking().rank(np.array([0.3, -1.0, 2.0, 0.5]))
        np.testing.assert_array_equal(ranks, [1, 0, 3, 2])

    @pytest.mark.unit
    def test_ties_are_stable(self):
        ranks = ExactRanking().rank(np.array([1.0, 0.0, 1.0, 0.0]))
        np.testing.assert_array_equal(ranks, [2, 0, 3, 1])

    @pytest.mark.unit
    def test_ranks_are_permutation(self):
        rng = np.random.RandomState(0)
        ranks = ExactRanking().rank(rng.random_sample(25))
        np.testing.assert_array_equal(np.sort(ranks), np.arange(25))

    @pytest.mark.unit
    def test_rank_columns_matches_per_column(self):
        rng = np.random.RandomState(1)
        matrix = rng.randint(0, 3, size=(5, 7)).astype(float)
        ranker = ExactRanking()

        ranks = ranker.rank_columns(matrix)
        for j in range(matrix.shape[1]):
            np.testing.assert_array_equal(ranks[:, j], ranker.rank(matrix[:, j]))

    @pytest.mark.unit
    def test_default_rank_columns_uses_rank(self):
        matrix = np.array([[0.0, 3.0], [1.0, 2.0], [2.0, 1.0]])
        ranks = ReverseRanking().rank_columns(matrix)
        np.testing.assert_array_equal(ranks, [[2, 0], [1, 1], [0, 2]])


@pytest.mark.unit
class TestRankerRegistry:
    """Test ranker lookup"""

    @pytest.mark.unit
    def test_lookup_by_enum(self):
        assert isinstance(get_ranker(NeighborhoodStrategy.EXACT), ExactRanking)

    @pytest.mark.unit
    def test_lookup_by_name(self):
        assert isinstance(get_ranker("exact"), ExactRanking)

    @pytest.mark.unit
    def test_unknown_name(self):
        with pytest.raises(UnknownConfigurationError, match="k-approximation"):
            get_ranker("k-approximation")
