"""
Command Line Interface for relational neural gas with observability
"""

import argparse
import json
import os
import sys
import structlog
from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.metrics import pairwise_distances

from relational_gas import (
    RelationalNeuralGas,
    RNGConfig,
    NeighborhoodStrategy,
    RelationalGasError,
    setup_logging,
    trace_operation,
)

# Initialize observability
setup_logging(
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    json_format=False,  # Use console format for CLI
)

logger = structlog.get_logger()


def load_data(file_path: str, format: str = "auto") -> np.ndarray:
    """Load a numeric matrix from csv, json, npy or npz"""
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    if format == "auto":
        format = path.suffix.lower()

    if format not in [".csv", "csv", ".json", "json", ".npy", "npy", ".npz", "npz"]:
        raise ValueError(f"Unsupported format: {format}")

    try:
        if format in [".csv", "csv"]:
            df = pd.read_csv(file_path, header=None)
            return df.apply(pd.to_numeric).to_numpy(dtype=np.float64)
        elif format in [".json", "json"]:
            with open(file_path, "r") as f:
                data = json.load(f)
            return np.array(data, dtype=np.float64)
        elif format in [".npy", "npy"]:
            return np.load(file_path).astype(np.float64)
        else:
            loaded = np.load(file_path)
            # Use first array if multiple arrays in npz
            key = list(loaded.keys())[0]
            return loaded[key].astype(np.float64)
    except (OSError, ValueError, TypeError, KeyError, IndexError) as e:
        raise ValueError(f"Failed to load data from {file_path}: {e}")


def to_dissimilarities(features: np.ndarray) -> np.ndarray:
    """Squared Euclidean dissimilarities between the rows of a feature table"""
    return pairwise_distances(features, metric="sqeuclidean")


def describe_matrix(matrix: np.ndarray) -> dict:
    """Summary of a dissimilarity matrix"""
    square = matrix.ndim == 2 and matrix.shape[0] == matrix.shape[1]
    return {
        "shape": list(matrix.shape),
        "square": bool(square),
        "symmetric": bool(square and np.allclose(matrix, matrix.T)),
        "zero_diagonal": bool(square and np.allclose(np.diag(matrix), 0.0)),
        "min": float(matrix.min()) if matrix.size else None,
        "max": float(matrix.max()) if matrix.size else None,
    }


def train_command(args) -> None:
    """Train relational neural gas on a dissimilarity matrix"""
    print(f"Loading data from: {args.input}")
    try:
        data = load_data(args.input, args.format)
        if data.ndim != 2:
            raise ValueError(f"Input must be a 2D matrix, got {data.ndim}D")
        if args.features:
            data = to_dissimilarities(data)
        print(f"Dissimilarity matrix shape: {data.shape}")

        config = RNGConfig(
            n_prototypes=args.prototypes,
            n_objects=data.shape[1],
            n_iterations=args.iterations,
            initial_lambda=args.lambda_,
            logging=args.log,
            neighborhood=NeighborhoodStrategy(args.neighborhood),
            seed=args.seed,
        )

        print(f"Training {args.prototypes} prototypes, {args.iterations} iterations")

        with trace_operation(
            "rng_training", n_prototypes=args.prototypes, n_objects=data.shape[1]
        ):
            model = RelationalNeuralGas(config, verbose=args.verbose)
            history = model.train(data)
            assignments = model.use(data)
            qe = model.quantization_error(data)

        print("Training completed!")
        print(f"Quantization Error: {qe:.4f}")

        results = {
            "assignments": assignments.tolist(),
            "quantization_error": qe,
            "prototypes": model.get_prototypes().tolist(),
            "logged_quantization_error": history.quantization_errors,
            "lambdas": history.lambdas,
            "info": {
                "n_prototypes": model.n_prototypes,
                "n_objects": model.n_objects,
                "iterations": model.metadata["total_iterations"],
            },
        }

        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"Results saved to: {args.output}")

    except (RelationalGasError, ValueError, OSError) as e:
        logger.error("Training failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def inspect_command(args) -> None:
    """Show properties of a dissimilarity matrix"""
    try:
        data = load_data(args.input, args.format)

        summary = describe_matrix(data)
        print("\n=== Dissimilarity Matrix ===")
        for key, value in summary.items():
            print(f"{key}: {value}")

    except (ValueError, OSError) as e:
        print(f"Error loading data: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Relational Neural Gas CLI",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Train command
    train_parser = subparsers.add_parser(
        "train", help="Cluster objects given by a dissimilarity matrix"
    )
    train_parser.add_argument("input", help="Input matrix file")
    train_parser.add_argument(
        "--output", "-o", default="rng_result.json", help="Output JSON file"
    )
    train_parser.add_argument(
        "--prototypes", "-k", type=int, default=2, help="Number of prototypes"
    )
    train_parser.add_argument(
        "--iterations", type=int, default=100, help="Number of training iterations"
    )
    train_parser.add_argument(
        "--lambda",
        dest="lambda_",
        type=float,
        help="Initial neighborhood range (0.5 * prototypes if not set)",
    )
    train_parser.add_argument(
        "--neighborhood",
        choices=[strategy.value for strategy in NeighborhoodStrategy],
        default=NeighborhoodStrategy.EXACT.value,
        help="Neighborhood ranking strategy",
    )
    train_parser.add_argument(
        "--features",
        action="store_true",
        help="Input holds feature vectors; use squared Euclidean dissimilarities",
    )
    train_parser.add_argument(
        "--format",
        choices=["auto", "csv", "json", "npy", "npz"],
        default="auto",
        help="Input data format",
    )
    train_parser.add_argument(
        "--seed", type=int, help="Random seed for reproducibility"
    )
    train_parser.add_argument(
        "--log", action="store_true", help="Record per-iteration history"
    )
    train_parser.add_argument("--verbose", action="store_true", help="Verbose output")

    # Inspect command
    inspect_parser = subparsers.add_parser(
        "inspect", help="Show properties of a dissimilarity matrix"
    )
    inspect_parser.add_argument("input", help="Input matrix file")
    inspect_parser.add_argument(
        "--format",
        choices=["auto", "csv", "json", "npy", "npz"],
        default="auto",
        help="Input data format",
    )

    # Version command
    subparsers.add_parser("version", help="Show version information")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "train":
        train_command(args)
    elif args.command == "inspect":
        inspect_command(args)
    elif args.command == "version":
        print("Relational Neural Gas CLI v0.1.0")
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
