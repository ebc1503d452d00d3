"""
Configuration classes and enums for relational neural gas
"""

from enum import Enum
from dataclasses import dataclass, asdict
from typing import Optional, Dict
import numpy as np

from .exceptions import UnknownConfigurationError


class NeighborhoodStrategy(Enum):
    """How prototypes are ranked per object during training"""

    EXACT = "exact"


@dataclass
class RNGConfig:
    """Centralized configuration management for relational neural gas"""

    # Basic parameters
    n_prototypes: int
    n_objects: int
    n_iterations: int = 100

    # Annealing: lambda decays geometrically from initial_lambda to final_lambda
    initial_lambda: Optional[float] = None  # Auto-calculated if None
    final_lambda: float = 0.01

    # Record prototype snapshots and quantization error per iteration
    logging: bool = False

    neighborhood: NeighborhoodStrategy = NeighborhoodStrategy.EXACT

    # Row sums with |sum| <= zero_tolerance are treated as zero
    zero_tolerance: float = 1e-10
    dtype: np.dtype = np.float64

    # Reproducibility
    seed: Optional[int] = None

    def __post_init__(self):
        """Auto-calculate initial lambda if not provided"""
        if self.initial_lambda is None:
            self.initial_lambda = 0.5 * self.n_prototypes

    def to_dict(self) -> Dict:
        """Convert config to dictionary for serialization"""
        config_dict = asdict(self)
        for key, value in config_dict.items():
            if isinstance(value, Enum):
                config_dict[key] = value.value
        config_dict["dtype"] = np.dtype(self.dtype).name
        return config_dict

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "RNGConfig":
        """Create config from dictionary"""
        config_dict = dict(config_dict)
        enum_fields = {"neighborhood": NeighborhoodStrategy}
        for field_name, enum_class in enum_fields.items():
            value = config_dict.get(field_name)
            if isinstance(value, str):
                try:
                    config_dict[field_name] = enum_class(value)
                except ValueError:
                    raise UnknownConfigurationError(
                        f"unknown {field_name} value: {value!r}", cls
                    ) from None
        if isinstance(config_dict.get("dtype"), str):
            config_dict["dtype"] = np.dtype(config_dict["dtype"]).type
        return cls(**config_dict)
