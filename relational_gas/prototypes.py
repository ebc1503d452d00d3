"""
Prototype coefficient storage
"""

from typing import Optional

import numpy as np

from .exceptions import InvalidConstructionError
from .relational import ZERO_TOLERANCE, row_normalize


class PrototypeSet:
    """
    K prototypes, each a convex combination over N objects

    Row i of the coefficient matrix holds the weights of prototype i over
    the objects. Rows sum to one unless their sum is numerically zero.
    """

    def __init__(
        self,
        n_prototypes: int,
        n_objects: int,
        rng: Optional[np.random.RandomState] = None,
        zero_tolerance: float = ZERO_TOLERANCE,
        dtype: np.dtype = np.float64,
    ):
        """
        Initialize random prototype coefficients

        Args:
            n_prototypes: Number of prototypes (may be zero)
            n_objects: Number of objects, the dimension of every prototype
            rng: Random state used for initialization
            zero_tolerance: Row sums at or below this magnitude are not divided
            dtype: Floating point type of the coefficients
        """
        if n_objects == 0:
            raise InvalidConstructionError(
                "prototype size must be greater than zero", self
            )
        if n_prototypes < 0 or n_objects < 0:
            raise InvalidConstructionError(
                "prototype count and size must not be negative", self
            )

        self.zero_tolerance = zero_tolerance
        rng = rng if rng is not None else np.random.RandomState()
        self._coefficients = rng.random_sample((n_prototypes, n_objects)).astype(
            dtype
        )
        self.row_normalize()

    @property
    def n_prototypes(self) -> int:
        return self._coefficients.shape[0]

    @property
    def n_objects(self) -> int:
        return self._coefficients.shape[1]

    @property
    def coefficients(self) -> np.ndarray:
        """Read-only view of the live coefficient matrix"""
        view = self._coefficients.view()
        view.flags.writeable = False
        return view

    def row_normalize(self) -> None:
        row_normalize(self._coefficients, self.zero_tolerance)

    def snapshot(self) -> np.ndarray:
        """Independent copy of the current coefficients"""
        return self._coefficients.copy()

    def replace(self, coefficients: np.ndarray) -> None:
        """Install new coefficients and normalize them"""
        if coefficients.shape != self._coefficients.shape:
            raise ValueError(
                f"Expected coefficients of shape {self._coefficients.shape}, "
                f"got {coefficients.shape}"
            )
        self._coefficients = np.array(
            coefficients, dtype=self._coefficients.dtype, copy=True
        )
        self.row_normalize()

    def __len__(self) -> int:
        return self.n_prototypes
