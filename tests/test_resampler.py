"""Tests for field/resampler.py: subdivision, stochastic rounding, eviction."""

import logging

import numpy as np
import pytest

from field.ensemble import Field, FieldTooSmallError, State
from field.resampler import Resampler

EPS = 0.01
JITTER = 1e-4
# Binary-exact threshold so subdivision counts are deterministic without jitter
EXACT_EPS = 0.25


def _field(theta1, theta2=None, capacity=None, anchors=None):
    """Build a field from explicit angle lists (momenta zero)."""
    theta1 = list(theta1)
    theta2 = list(theta2) if theta2 is not None else [0.0] * len(theta1)
    anchors = anchors if anchors is not None else [(0.0, 0.0)] * len(theta1)
    states = [
        State(
            g=10.0, length=75.0, mass=10.0,
            phase=np.array([t1, t2, 0.0, 0.0]),
            x=ax, y=ay,
            color=(0.0, 0.5, 1.0, 0.05),
            sequence_index=i,
        )
        for i, (t1, t2, (ax, ay)) in enumerate(zip(theta1, theta2, anchors))
    ]
    return Field.from_states(states, capacity or len(states))


def _resampler(capacity, seed=0, jitter=JITTER, epsilon=EPS):
    return Resampler(capacity, epsilon=epsilon, jitter=jitter,
                     rng=np.random.default_rng(seed))


class TestPrecondition:
    """The resampler refuses fields too small for neighbour lookups."""

    def test_four_samples_raise(self):
        field = _field([0.0, 0.5, 1.0, 1.5], capacity=100)
        with pytest.raises(FieldTooSmallError):
            _resampler(100).resample(field)
        assert len(field) == 4

    def test_five_samples_ok(self):
        field = _field([0.0, 0.5, 1.0, 1.5, 2.0], capacity=100)
        _resampler(100).resample(field)
        assert len(field) > 5


class TestDenseField:
    """Pairs closer than epsilon are left alone."""

    def test_no_change_when_dense(self):
        theta1 = np.arange(20) * 0.005
        field = _field(theta1, capacity=20)
        before = field.phase.copy()

        report = _resampler(20).resample(field)

        np.testing.assert_array_equal(field.phase, before)
        assert report.pairs_subdivided == 0
        assert report.inserted == 0
        assert report.evicted_front == 0
        assert report.evicted_back == 0
        assert report.size == 20

    def test_theta2_gap_alone_triggers(self):
        field = _field([0.0] * 6, theta2=[0.0, 0.05, 0.05, 0.05, 0.05, 0.05],
                       capacity=100)
        report = _resampler(100).resample(field)
        assert report.pairs_subdivided == 1
        assert report.inserted >= 4


class TestDensification:
    """A wide pair is split so every new gap is below epsilon."""

    @pytest.mark.parametrize("seed", range(10))
    def test_gap_of_point_one(self, seed):
        theta = [0.0, 0.1, 0.1, 0.1, 0.1]
        field = _field(theta, theta2=theta, capacity=1000)

        report = _resampler(1000, seed=seed).resample(field)

        assert 9 <= report.inserted <= 11
        assert len(field) == 5 + report.inserted
        gaps = field.adjacent_gaps()
        assert np.all(gaps < EPS + JITTER)
        # endpoints of the wide pair are untouched
        assert field.theta1[0] == 0.0
        assert field.theta1[report.inserted + 1] == 0.1

    def test_inserted_samples_are_monotone(self):
        field = _field([0.0, 0.1, 0.1, 0.1, 0.1], capacity=1000)
        report = _resampler(1000).resample(field)
        block = field.theta1[: report.inserted + 2]
        assert np.all(np.diff(block) > 0)

    def test_inserted_copy_left_neighbour_columns(self):
        anchors = [(float(i), -float(i)) for i in range(6)]
        field = _field([0.0, 0.0, 0.0, 0.05, 0.05, 0.05], capacity=100,
                       anchors=anchors)
        report = _resampler(100).resample(field)

        k = report.inserted
        assert k >= 4
        # rows 3..3+k-1 were inserted between original rows 2 and 3
        np.testing.assert_array_equal(field.anchor[3:3 + k], [[2.0, -2.0]] * k)
        np.testing.assert_array_equal(field.anchor[3 + k], [3.0, -3.0])
        np.testing.assert_array_equal(field.physics[3:3 + k], [[10.0, 75.0, 10.0]] * k)

    def test_momenta_are_interpolated(self):
        states = [
            State(g=10.0, length=75.0, mass=10.0,
                  phase=np.array([t, 0.0, p, -p]), x=0.0, y=0.0,
                  color=(0.0, 0.0, 0.0, 0.0), sequence_index=i)
            for i, (t, p) in enumerate(
                [(0.0, 0.0), (0.75, 30.0), (0.75, 30.0), (0.75, 30.0), (0.75, 30.0)]
            )
        ]
        field = Field.from_states(states, capacity=100)
        _resampler(100, jitter=0.0, epsilon=EXACT_EPS).resample(field)

        # n_target = 4 exactly, so alphas are 1/4, 2/4, 3/4
        np.testing.assert_allclose(field.phase[1:4, 2], [7.5, 15.0, 22.5])
        np.testing.assert_allclose(field.phase[1:4, 3], [-7.5, -15.0, -22.5])

    def test_new_pairs_not_revisited(self):
        """Only the original pairs of a pass are examined."""
        field = _field([0.0, 0.1, 0.1, 0.1, 0.1], capacity=1000)
        report = _resampler(1000).resample(field)
        assert report.pairs_subdivided == 1


class TestStochasticRounding:
    """The expected number of inserted samples matches the continuous target."""

    def test_expected_count(self):
        # n_target = 0.375 / 0.25 + 1 = 2.5
        rng = np.random.default_rng(42)
        resampler = Resampler(1000, epsilon=EXACT_EPS, jitter=0.0, rng=rng)
        counts = []
        for _ in range(2000):
            field = _field([0.0, 0.375, 0.375, 0.375, 0.375], capacity=1000)
            counts.append(resampler.resample(field).inserted)

        assert set(counts) == {1, 2}
        assert abs(np.mean(counts) - 1.5) < 0.05

    def test_integral_target_never_rounds_up(self):
        resampler = Resampler(1000, epsilon=EXACT_EPS, jitter=0.0,
                              rng=np.random.default_rng(7))
        for _ in range(200):
            field = _field([0.0, 0.75, 0.75, 0.75, 0.75], capacity=1000)
            assert resampler.resample(field).inserted == 3

    def test_seeded_passes_are_reproducible(self):
        rng_theta = np.random.default_rng(5).uniform(0, 0.5, size=40)
        a = _field(np.cumsum(rng_theta), capacity=200)
        b = _field(np.cumsum(rng_theta), capacity=200)
        _resampler(200, seed=11).resample(a)
        _resampler(200, seed=11).resample(b)
        np.testing.assert_array_equal(a.phase, b.phase)


class TestEviction:
    """Capacity is restored by evicting away from the densified region."""

    def test_first_half_evicts_from_back(self):
        # wide pair (1, 2) with n_target = 4 -> 3 inserted
        theta1 = [0.0, 0.125, 0.875, 1.0, 1.125, 1.25, 1.375, 1.5, 1.625, 1.75]
        field = _field(theta1, capacity=10)

        report = _resampler(10, jitter=0.0, epsilon=EXACT_EPS).resample(field)

        assert report.inserted == 3
        assert report.evicted_back == 3
        assert report.evicted_front == 0
        assert len(field) == 10
        assert field.theta1[0] == 0.0
        assert field.theta1[-1] == 1.375

    def test_second_half_evicts_from_front(self):
        # wide pair (7, 8): 7 > (10 + 3) / 2
        theta1 = [0.125 * i for i in range(8)] + [1.625, 1.75]
        field = _field(theta1, capacity=10)

        report = _resampler(10, jitter=0.0, epsilon=EXACT_EPS).resample(field)

        assert report.inserted == 3
        assert report.evicted_front == 3
        assert report.evicted_back == 0
        assert len(field) == 10
        assert field.theta1[0] == 0.375
        assert field.theta1[-1] == 1.75

    def test_back_eviction_drops_later_pairs(self):
        """A pair whose samples were evicted earlier in the pass is skipped."""
        theta1 = [0.0, 0.75, 0.875, 1.0, 1.125, 1.25, 1.375, 1.5, 1.625, 2.625]
        field = _field(theta1, capacity=10)

        report = _resampler(10, jitter=0.0, epsilon=EXACT_EPS).resample(field)

        assert report.pairs_subdivided == 1
        assert report.evicted_back == 3
        assert len(field) == 10
        assert np.max(field.adjacent_gaps()) < EXACT_EPS

    @pytest.mark.parametrize("seed", range(5))
    def test_capacity_invariant_random_fields(self, seed):
        rng = np.random.default_rng(seed)
        theta1 = np.cumsum(rng.uniform(0.0, 0.2, size=50))
        theta2 = np.cumsum(rng.uniform(-0.2, 0.2, size=50))
        field = _field(theta1, theta2, capacity=50)

        report = _resampler(50, seed=seed).resample(field)

        assert len(field) == 50
        assert report.size == 50
        np.testing.assert_array_equal(field.sequence_index, np.arange(50))

    def test_below_capacity_grows_without_eviction(self):
        field = _field([0.0, 0.05, 0.05, 0.05, 0.05], capacity=100)
        report = _resampler(100).resample(field)
        assert report.evicted_front == 0
        assert report.evicted_back == 0
        assert len(field) == 5 + report.inserted


class TestWideGaps:
    """Gaps wider than capacity * epsilon keep the true subdivision count."""

    def test_spacing_uses_true_count(self):
        # n_target = 15 / 0.25 + 1 = 61, far more rows than capacity 50
        theta1 = [0.0, 0.125] + [15.125 + 0.125 * j for j in range(48)]
        field = _field(theta1, capacity=50)

        report = _resampler(50, jitter=0.0, epsilon=EXACT_EPS).resample(field)

        assert report.inserted == 60
        assert report.evicted_back == 60
        assert report.evicted_front == 0
        assert len(field) == 50
        # orig 0, orig 1, then the first 48 of the 60 inserted samples
        expected = 0.125 + 15.0 * np.arange(1, 49) / 61.0
        np.testing.assert_allclose(field.theta1[2:], expected)
        assert np.max(field.adjacent_gaps()) < EXACT_EPS

    def test_small_capacity_keeps_gaps_below_epsilon(self):
        theta1 = [0.0, 0.001, 0.601] + [0.601 + 0.001 * j for j in range(1, 48)]
        field = _field(theta1, capacity=50)

        report = _resampler(50, jitter=0.0).resample(field)

        assert report.inserted in (60, 61)
        assert len(field) == 50
        assert np.max(field.adjacent_gaps()) < EPS

    def test_huge_finite_gap_does_not_overflow(self):
        field = _field([0.0, 1e200, 1e200, 1e200, 1e200], capacity=5)

        report = _resampler(5).resample(field)

        assert len(field) == 5
        assert report.inserted > 10**190
        assert np.all(np.isfinite(field.phase))
        assert field.theta1[0] == 0.0
        assert np.max(field.adjacent_gaps()) < EPS + 2 * JITTER


class TestNonFinite:
    """NaN gaps subdivide at the maximum count but never break the bound."""

    def test_nan_sample(self, caplog):
        theta1 = [0.0, 0.001, float("nan"), 0.003, 0.004,
                  0.005, 0.006, 0.007, 0.008, 0.009]
        field = _field(theta1, capacity=10)

        with caplog.at_level(logging.WARNING, logger="field.resampler"):
            report = _resampler(10).resample(field)

        assert len(field) == 10
        assert report.size == 10
        assert "not finite" in caplog.text
