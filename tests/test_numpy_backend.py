"""Tests for field/_numpy_backend.py: vectorized RK4 cross-validation.

Verifies that the batch derivatives and integration produce results
consistent with the scalar simulation.py implementation.
"""

import math

import numpy as np
import pytest

from simulation import PendulumParams, derivatives, rk4_step
from field._numpy_backend import NumpyBackend, derivatives_batch, rk4_step_batch


def _physics(n, params):
    physics = np.empty((n, 3), dtype=np.float64)
    physics[:, 0] = params.g
    physics[:, 1] = params.length
    physics[:, 2] = params.mass
    return physics


class TestDerivativesBatch:
    """Cross-validate batch derivatives against scalar derivatives."""

    def test_single_sample_matches_scalar(self):
        params = PendulumParams()
        state = np.array([1.0, 0.5, 0.1, -0.2])
        batch_d = derivatives_batch(state[np.newaxis, :], _physics(1, params))
        scalar_d = derivatives(state, params)

        for i in range(4):
            assert abs(batch_d[0, i] - scalar_d[i]) < 1e-12, (
                f"Component {i}: batch={batch_d[0, i]}, scalar={scalar_d[i]}"
            )

    def test_multiple_samples(self):
        params = PendulumParams()
        test_states = [
            [0.0, 0.0, 0.0, 0.0],
            [math.pi / 2, math.pi / 2, 0.0, 0.0],
            [1.0, -1.0, 2.0, -2.0],
            [3.1, 2.9, 50.0, -20.0],
        ]
        states = np.array(test_states, dtype=np.float64)
        batch_d = derivatives_batch(states, _physics(len(test_states), params))

        for j, state in enumerate(test_states):
            scalar_d = derivatives(np.array(state), params)
            np.testing.assert_allclose(batch_d[j], scalar_d, rtol=1e-12, atol=1e-12)

    def test_per_row_physics(self):
        """Each row must use its own g, length and mass."""
        a = PendulumParams(g=10.0, length=75.0, mass=10.0)
        b = PendulumParams(g=3.0, length=1.5, mass=0.5)
        state = np.array([0.7, -0.3, 1.0, -0.5])

        states = np.array([state, state])
        physics = np.vstack([_physics(1, a), _physics(1, b)])
        batch_d = derivatives_batch(states, physics)

        np.testing.assert_allclose(batch_d[0], derivatives(state, a), rtol=1e-12)
        np.testing.assert_allclose(batch_d[1], derivatives(state, b), rtol=1e-12)

    def test_output_shape(self):
        params = PendulumParams()
        n = 100
        states = np.random.default_rng(0).normal(size=(n, 4))
        assert derivatives_batch(states, _physics(n, params)).shape == (n, 4)


class TestRK4StepBatch:
    """Test one vectorized RK4 step."""

    def test_matches_scalar_rk4(self):
        params = PendulumParams()
        rng = np.random.default_rng(1)
        states = rng.uniform(-math.pi, math.pi, size=(32, 4))
        states[:, 2:] = rng.normal(scale=100.0, size=(32, 2))

        result = rk4_step_batch(states, _physics(32, params), 0.0125)
        for j in range(32):
            expected = rk4_step(states[j], params, 0.0125)
            np.testing.assert_allclose(result[j], expected, rtol=1e-12, atol=1e-12)

    def test_equilibrium_stays_exactly_zero(self):
        params = PendulumParams()
        states = np.zeros((8, 4))
        physics = _physics(8, params)
        for _ in range(200):
            states = rk4_step_batch(states, physics, 0.0125)
        assert np.all(states == 0.0)

    def test_does_not_mutate_input(self):
        params = PendulumParams()
        states = np.array([[3.1, 2.9, 0.0, 0.0]] * 4)
        before = states.copy()
        rk4_step_batch(states, _physics(4, params), 0.0125)
        np.testing.assert_array_equal(states, before)


class TestNumpyBackend:
    """Test the backend wrapper."""

    def test_step_batch_delegates(self):
        params = PendulumParams()
        states = np.array([[3.1, 2.9, 0.0, 0.0], [0.2, 0.1, 1.0, 0.0]])
        physics = _physics(2, params)
        np.testing.assert_array_equal(
            NumpyBackend().step_batch(states, physics, 0.0125),
            rk4_step_batch(states, physics, 0.0125),
        )

    def test_output_dtype(self):
        params = PendulumParams()
        result = NumpyBackend().step_batch(
            np.zeros((3, 4), dtype=np.float32), _physics(3, params), 0.0125,
        )
        assert result.dtype == np.float64
        assert result.shape == (3, 4)
