"""Relational distance utilities for prototypes given as convex combinations."""

import numpy as np


# Default tolerance for treating a value as zero
ZERO_TOLERANCE = 1e-10


def is_numerical_zero(value, tolerance: float = ZERO_TOLERANCE):
    """Check whether a scalar, or each entry of an array, is zero within the tolerance."""
    return np.abs(value) <= tolerance


def row_normalize(matrix: np.ndarray, tolerance: float = ZERO_TOLERANCE) -> np.ndarray:
    """Scale each row to sum to one in place; numerically zero rows stay as they are."""
    sums = matrix.sum(axis=1)
    nonzero = ~is_numerical_zero(sums, tolerance)
    matrix[nonzero] /= sums[nonzero, np.newaxis]
    return matrix


class RelationalDistance:
    """Distances between prototypes and objects known only by dissimilarities."""

    @staticmethod
    def raw(coefficients: np.ndarray, dissimilarities: np.ndarray) -> np.ndarray:
        """Adapted distances without bias correction: alpha @ D."""
        return coefficients @ dissimilarities

    @staticmethod
    def adaptation(
        coefficients: np.ndarray, dissimilarities: np.ndarray
    ) -> np.ndarray:
        """
        Bias-corrected distance from every prototype to every object.

        ||x_j - w_i||^2 = (D alpha_i)_j - 0.5 * alpha_i^T D alpha_i
        """
        adapted = coefficients @ dissimilarities
        bias = 0.5 * np.einsum("ij,ij->i", coefficients, adapted)
        return adapted - bias[:, np.newaxis]

    @staticmethod
    def quantization_error(adaptation: np.ndarray) -> float:
        """Half the sum over objects of the distance to the closest prototype."""
        return float(0.5 * np.sum(np.min(adaptation, axis=0)))

    @staticmethod
    def nearest(distances: np.ndarray) -> np.ndarray:
        """Index of the closest prototype for every column, lowest index on ties."""
        return np.argmin(distances, axis=0)
