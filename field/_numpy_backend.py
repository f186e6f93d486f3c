"""NumPy vectorized RK4 backend for field integration.

All N samples advance through one timestep simultaneously as a single
(N, 4) NumPy array. Physics parameters are per-row columns so samples
inserted by the resampler keep whatever parameters they were copied from.

IMPORTANT: No in-place mutation (uses phase = phase + delta, never +=).

Physics equations here duplicate simulation.py's derivatives() but operate
on (N, 4) arrays. See test_numpy_backend.py for cross-validation tests.
"""

from __future__ import annotations

import numpy as np


class NumpyBackend:
    """Pure NumPy vectorized RK4 compute backend."""

    def step_batch(
        self,
        phase: np.ndarray,
        physics: np.ndarray,
        h: float,
    ) -> np.ndarray:
        """Advance N samples by one RK4 step.

        Args:
            phase: (N, 4) float64 array [theta1, theta2, p1, p2].
            physics: (N, 3) float64 array [g, length, mass].
            h: Step size.

        Returns:
            New (N, 4) float64 array.
        """
        return rk4_step_batch(phase, physics, h)


def derivatives_batch(phase: np.ndarray, physics: np.ndarray) -> np.ndarray:
    """Compute derivatives for N samples simultaneously.

    Args:
        phase: (N, 4) array with columns [theta1, theta2, p1, p2].
        physics: (N, 3) array with columns [g, length, mass].

    Returns:
        (N, 4) array of derivatives [d_theta1, d_theta2, d_p1, d_p2].

    Physics equations match simulation.py derivatives() exactly.
    """
    theta1 = phase[:, 0]
    theta2 = phase[:, 1]
    p1 = phase[:, 2]
    p2 = phase[:, 3]

    g = physics[:, 0]
    length = physics[:, 1]
    mass = physics[:, 2]

    ml2 = mass * length * length
    delta = theta1 - theta2
    cos_delta = np.cos(delta)
    sin_delta = np.sin(delta)
    denom = 16.0 - 9.0 * cos_delta**2

    theta1_dot = (6.0 / ml2) * (2.0 * p1 - 3.0 * p2 * cos_delta) / denom
    theta2_dot = (6.0 / ml2) * (8.0 * p2 - 3.0 * p1 * cos_delta) / denom

    p1_dot = -0.5 * ml2 * (
        theta1_dot * theta2_dot * sin_delta + 3.0 * (g / length) * np.sin(theta1)
    )
    p2_dot = -0.5 * ml2 * (
        -theta1_dot * theta2_dot * sin_delta + (g / length) * np.sin(theta2)
    )

    result = np.empty_like(phase)
    result[:, 0] = theta1_dot
    result[:, 1] = theta2_dot
    result[:, 2] = p1_dot
    result[:, 3] = p2_dot

    return result


def rk4_step_batch(phase: np.ndarray, physics: np.ndarray, h: float) -> np.ndarray:
    """Run one vectorized RK4 step over every row of phase."""
    phase = phase.astype(np.float64, copy=False)

    k1 = derivatives_batch(phase, physics)
    k2 = derivatives_batch(phase + 0.5 * h * k1, physics)
    k3 = derivatives_batch(phase + 0.5 * h * k2, physics)
    k4 = derivatives_batch(phase + h * k3, physics)

    return phase + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
