"""
Pytest configuration and fixtures for relational neural gas tests
"""

import pytest
import numpy as np
from sklearn.datasets import make_blobs
from sklearn.metrics import pairwise_distances

from relational_gas import RelationalNeuralGas, RNGConfig, setup_logging

setup_logging(log_level="WARNING", json_format=False)


@pytest.fixture
def two_cluster_matrix():
    """Four objects in two tight pairs: {0, 1} and {2, 3}"""
    return np.array(
        [
            [0.0, 0.1, 5.0, 5.0],
            [0.1, 0.0, 5.0, 5.0],
            [5.0, 5.0, 0.0, 0.1],
            [5.0, 5.0, 0.1, 0.0],
        ]
    )


@pytest.fixture
def blob_data():
    """Three well separated blobs and their squared Euclidean dissimilarities"""
    points, labels = make_blobs(
        n_samples=30, centers=3, cluster_std=0.5, random_state=0
    )
    return pairwise_distances(points, metric="sqeuclidean"), labels


@pytest.fixture
def small_matrix():
    """Random symmetric dissimilarity matrix with zero diagonal"""
    rng = np.random.RandomState(7)
    points = rng.random_sample((8, 2))
    return pairwise_distances(points, metric="sqeuclidean")


@pytest.fixture
def basic_config():
    """Two prototypes over four objects"""
    return RNGConfig(n_prototypes=2, n_objects=4, n_iterations=20, seed=42)


@pytest.fixture
def trained_model(basic_config, two_cluster_matrix):
    """Model trained on the two cluster matrix"""
    model = RelationalNeuralGas(basic_config)
    model.train(two_cluster_matrix)
    return model
