"""Tests for field/compute.py: configuration, seed parameters, backend selection."""

import logging

import numpy as np
import pytest

from field.compute import (
    DEFAULT_CAPACITY, DEFAULT_EPSILON, DEFAULT_JITTER, DEFAULT_STEP,
    MIN_FIELD_SIZE, FieldConfig, SeedParams, get_default_backend,
)


class TestFieldConfig:
    """Test FieldConfig defaults and validation."""

    def test_defaults(self):
        config = FieldConfig()
        assert config.capacity == DEFAULT_CAPACITY == 4096
        assert config.step == DEFAULT_STEP == 0.0125
        assert config.epsilon == DEFAULT_EPSILON == 0.01
        assert config.jitter == DEFAULT_JITTER == 1e-4

    def test_immutable(self):
        config = FieldConfig()
        with pytest.raises(AttributeError):
            config.capacity = 10

    @pytest.mark.parametrize("kwargs, match", [
        (dict(capacity=0), "capacity"),
        (dict(step=0.0), "step"),
        (dict(step=-0.1), "step"),
        (dict(epsilon=0.0), "epsilon"),
        (dict(jitter=-1e-5), "jitter"),
        (dict(epsilon=0.01, jitter=0.01), "jitter"),
    ])
    def test_rejects_invalid(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            FieldConfig(**kwargs)

    def test_zero_jitter_allowed(self):
        assert FieldConfig(jitter=0.0).jitter == 0.0

    def test_small_capacity_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="field.compute"):
            FieldConfig(capacity=MIN_FIELD_SIZE - 1)
        assert "below the minimum" in caplog.text


class TestSeedParams:
    """Test SeedParams defaults."""

    def test_defaults(self):
        seed = SeedParams()
        assert (seed.g, seed.length, seed.mass) == (10.0, 75.0, 10.0)
        assert (seed.x, seed.y) == (0.0, 0.0)
        assert seed.theta1 == 2.9
        assert seed.theta2 == 1.3
        assert seed.spread == 1e-3

    def test_immutable(self):
        with pytest.raises(AttributeError):
            SeedParams().theta1 = 0.0


class TestGetDefaultBackend:
    """Test backend auto-selection."""

    def test_returns_working_backend(self):
        backend = get_default_backend()
        phase = np.array([[0.0, 0.0, 0.0, 0.0], [0.5, 0.2, 0.0, 0.0]])
        physics = np.array([[10.0, 75.0, 10.0]] * 2)
        out = backend.step_batch(phase, physics, 0.0125)
        assert out.shape == (2, 4)
        assert np.all(out[0] == 0.0)
