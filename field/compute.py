"""Field compute: configuration, ComputeBackend Protocol, backend selection.

The ComputeBackend Protocol abstracts the "advance every sample by one RK4
step" contract. Two backends are auto-selected via try/except ImportError:
  Numba > NumPy
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import numpy as np

logger = logging.getLogger(__name__)

# Smallest field the resampler's neighbour lookups can work with
MIN_FIELD_SIZE = 5

DEFAULT_CAPACITY = 4096
DEFAULT_STEP = 0.0125
DEFAULT_EPSILON = 0.01
DEFAULT_JITTER = 1e-4


@dataclass(frozen=True)
class FieldConfig:
    """Immutable simulation settings for one field."""

    capacity: int = DEFAULT_CAPACITY
    step: float = DEFAULT_STEP
    epsilon: float = DEFAULT_EPSILON
    jitter: float = DEFAULT_JITTER

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {self.capacity}")
        if self.step <= 0:
            raise ValueError(f"step must be positive, got {self.step}")
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if not 0 <= self.jitter < self.epsilon:
            raise ValueError(
                f"jitter must lie in [0, epsilon), got {self.jitter}"
            )
        if self.capacity < MIN_FIELD_SIZE:
            logger.warning(
                "capacity %d is below the minimum field size %d; "
                "resampling will fail",
                self.capacity, MIN_FIELD_SIZE,
            )


@dataclass(frozen=True)
class SeedParams:
    """Initial conditions and physics shared by every seeded sample.

    theta2 is spread linearly across the ensemble:
    theta2_i = theta2 + (spread / capacity) * (i + 1).
    """

    g: float = 10.0
    length: float = 75.0
    mass: float = 10.0
    x: float = 0.0
    y: float = 0.0
    theta1: float = 2.9
    theta2: float = 1.3
    spread: float = 1e-3


class ComputeBackend(Protocol):
    """Protocol for pluggable field integration backends."""

    def step_batch(
        self,
        phase: np.ndarray,    # (N, 4) float64
        physics: np.ndarray,  # (N, 3) float64 [g, length, mass]
        h: float,
    ) -> np.ndarray:
        """Return the (N, 4) phase array advanced by one RK4 step of size h."""
        ...


def get_default_backend() -> ComputeBackend:
    """Auto-select the best available compute backend.

    Priority: Numba > NumPy.
    """
    try:
        from field._numba_backend import NumbaBackend
        logger.info("Using Numba compute backend")
        return NumbaBackend()
    except ImportError:
        pass

    from field._numpy_backend import NumpyBackend
    logger.info("Using NumPy compute backend")
    return NumpyBackend()
