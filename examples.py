"""
Example usage of the relational neural gas package
"""

import numpy as np
from sklearn.datasets import make_blobs
from sklearn.metrics import pairwise_distances

from relational_gas import (
    RelationalNeuralGas,
    RNGConfig,
    DistributedRelationalNeuralGas,
    EarlyStoppingCallback,
    LocalCoordinator,
)


def run_examples():
    """Run examples of relational neural gas usage"""

    # Example 1: Clustering objects known only by their dissimilarities
    print("Example 1: Basic relational neural gas with logging")
    points, labels = make_blobs(n_samples=60, centers=3, random_state=42)
    dissimilarities = pairwise_distances(points, metric="sqeuclidean")

    config = RNGConfig(
        n_prototypes=3,
        n_objects=len(points),
        n_iterations=50,
        logging=True,
        seed=42,
    )
    model = RelationalNeuralGas(config)
    history = model.train(dissimilarities)

    print(f"Quantization error, first iteration: {history.quantization_errors[0]:.4f}")
    print(f"Quantization error, last iteration: {history.quantization_errors[-1]:.4f}")

    assignments = model.use(dissimilarities)
    for cluster in range(config.n_prototypes):
        members = labels[assignments == cluster]
        print(f"Prototype {cluster}: {len(members)} objects, blob labels {set(members)}")

    # Example 2: Continue training from the current prototypes
    print("\nExample 2: Incremental training")
    model.train(dissimilarities, n_iterations=20, lambda_=0.5)
    print(f"Total iterations: {model.metadata['total_iterations']}")

    # Example 3: Stop once the quantization error settles
    print("\nExample 3: Early stopping")
    config = RNGConfig(n_prototypes=3, n_objects=len(points), n_iterations=500, seed=1)
    model = RelationalNeuralGas(config)
    model.train(
        dissimilarities,
        callbacks=[EarlyStoppingCallback(monitor="qe", patience=5, min_delta=1e-6)],
    )
    print(f"Stopped after {model.metadata['total_iterations']} iterations")

    # Example 4: Prototype-sharded training (one process here)
    print("\nExample 4: Sharded training with a local coordinator")
    config = RNGConfig(n_prototypes=3, n_objects=len(points), n_iterations=50, seed=42)
    sharded = DistributedRelationalNeuralGas(config, LocalCoordinator())
    sharded.train(dissimilarities)
    print(f"Global prototype count: {sharded.total_prototype_count()}")
    print(f"Assignments: {sharded.use(dissimilarities)[:10]}")


if __name__ == "__main__":
    run_examples()
