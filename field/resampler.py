"""Adaptive resampler: densify diverging neighbours, keep the field bounded.

For every ORIGINAL adjacent pair (cur, next) of the current tick, left to
right:

1. epsilon = base epsilon + uniform jitter.
2. If both |d theta1| and |d theta2| are below epsilon, nothing happens.
3. Otherwise n_target = max_diff / epsilon + 1 is stochastically rounded to
   an integer n and n - 1 samples are linearly interpolated between cur and
   next (alpha = i / n), copying every other column from cur.
4. If the field now exceeds capacity it is trimmed back to capacity from the
   front when cur sat in the back half (cur.sequence_index > size / 2), and
   from the back otherwise.

The pass runs in two phases. All random draws and subdivision counts are
computed up front from the read-only gaps (the phase-space points of the
original pairs never change during resampling). The insert/evict sequence
is then replayed on counters alone: front and back eviction totals plus the
number of rows inserted so far locate every original sample in the virtual
grown sequence. Finally only the rows that survive eviction are built, in a
single concatenate, so the count n is never clamped to the capacity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from field.compute import DEFAULT_EPSILON, DEFAULT_JITTER
from field.ensemble import CARRIED_COLUMNS, Field, interpolate_phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResampleReport:
    """What one resampling pass did to the field."""

    pairs_subdivided: int
    inserted: int
    evicted_front: int
    evicted_back: int
    size: int


@dataclass(frozen=True)
class SubdivisionPlan:
    """Per-pair decisions drawn before any structural change.

    counts[i] is the subdivision count n for pair (i, i+1); only entries
    where triggered[i] is True are meaningful.
    """

    epsilons: np.ndarray   # (N-1,) float64
    triggered: np.ndarray  # (N-1,) bool
    counts: np.ndarray     # (N-1,) float64 whole numbers


class Resampler:
    """Stochastic-rounding subdivision with position-dependent eviction.

    The random source is injected so that passes are reproducible under
    test; it supplies both the epsilon jitter and the rounding draw.
    """

    def __init__(
        self,
        capacity: int,
        epsilon: float = DEFAULT_EPSILON,
        jitter: float = DEFAULT_JITTER,
        rng: np.random.Generator | None = None,
    ):
        self.capacity = capacity
        self.epsilon = epsilon
        self.jitter = jitter
        self.rng = rng if rng is not None else np.random.default_rng()

    def plan(self, field: Field) -> SubdivisionPlan:
        """Draw epsilons and subdivision counts for every adjacent pair."""
        n_pairs = max(len(field) - 1, 0)
        gaps = field.adjacent_gaps()

        epsilons = self.epsilon + self.rng.uniform(
            -self.jitter, self.jitter, size=n_pairs,
        )
        rounding = self.rng.random(n_pairs)

        dense = (gaps[:, 0] < epsilons) & (gaps[:, 1] < epsilons)
        triggered = ~dense

        max_diff = gaps.max(axis=1) if n_pairs else np.zeros(0)
        with np.errstate(invalid="ignore", over="ignore"):
            n_target = max_diff / epsilons + 1.0
        finite = np.isfinite(n_target)

        # A non-finite gap has no meaningful count; use the most that can
        # survive eviction
        target = np.where(finite, n_target, float(self.capacity + 1))
        whole = np.floor(target)
        counts = whole + (rounding < (target - whole))

        bad = triggered & ~finite
        if np.any(bad):
            logger.warning(
                "%d neighbour gaps are not finite; subdividing at the "
                "maximum count", int(np.count_nonzero(bad)),
            )

        return SubdivisionPlan(epsilons, triggered, counts)

    def resample(self, field: Field) -> ResampleReport:
        """Run one left-to-right resampling pass over the field in place.

        Raises:
            FieldTooSmallError: if the field has fewer than MIN_SIZE samples.
        """
        field.require_min_size()

        n = len(field)
        plan = self.plan(field)

        # Positions below are Python ints in the fully grown sequence, so
        # huge finite counts cannot overflow.
        front = 0
        back = 0
        virtual = n
        inserted_before = 0
        blocks = []

        for i in np.flatnonzero(plan.triggered):
            i = int(i)
            count = int(plan.counts[i])
            k = count - 1
            pos = i + inserted_before

            # cur has become the last element (everything after was evicted)
            if pos + 1 >= virtual - back:
                break
            # cur itself was evicted from the front earlier this pass
            if pos < front or k <= 0:
                continue

            blocks.append((i, count))
            inserted_before = inserted_before + k
            virtual = virtual + k

            size = virtual - front - back
            if size > self.capacity:
                excess = size - self.capacity
                if 2 * int(field.sequence_index[i]) > size:
                    front = front + excess
                else:
                    back = back + excess

        if blocks:
            self._apply(field, blocks, front, virtual - back)

        report = ResampleReport(
            pairs_subdivided=len(blocks),
            inserted=inserted_before,
            evicted_front=front,
            evicted_back=back,
            size=len(field),
        )
        if blocks:
            logger.debug(
                "Resampled: %d pairs, +%d samples, -%d front, -%d back, size %d",
                report.pairs_subdivided, report.inserted,
                report.evicted_front, report.evicted_back, report.size,
            )
        return report

    @staticmethod
    def _apply(field: Field, blocks, keep_start: int, keep_stop: int) -> None:
        """Build rows [keep_start, keep_stop) of the grown sequence.

        blocks holds (i, n) for every subdivided pair: n - 1 rows at
        alpha = t / n, t = 1..n-1, follow original row i. Rows outside the
        kept window are never materialized.
        """
        phase = field.phase
        carried = {name: getattr(field, name) for name in CARRIED_COLUMNS}

        phase_pieces = []
        carried_pieces = {name: [] for name in CARRIED_COLUMNS}

        def keep_originals(start, stop, v):
            lo, hi = _clip(v, stop - start, keep_start, keep_stop)
            if hi > lo:
                phase_pieces.append(phase[start + lo:start + hi])
                for name, col in carried.items():
                    carried_pieces[name].append(col[start + lo:start + hi])
            return v + (stop - start)

        start = 0
        v = 0
        for i, count in blocks:
            v = keep_originals(start, i + 1, v)

            k = count - 1
            lo, hi = _clip(v, k, keep_start, keep_stop)
            if hi > lo:
                # alpha = t / n for the surviving t = lo+1 .. hi
                t = float(lo + 1) + np.arange(hi - lo, dtype=np.float64)
                alphas = t / float(count)
                phase_pieces.append(interpolate_phase(phase[i], phase[i + 1], alphas))
                for name, col in carried.items():
                    carried_pieces[name].append(
                        np.repeat(col[i:i + 1], hi - lo, axis=0)
                    )
            v = v + k
            start = i + 1

        keep_originals(start, len(field), v)

        field.replace_columns(
            np.concatenate(phase_pieces),
            **{name: np.concatenate(pieces) for name, pieces in carried_pieces.items()},
        )
        field.refresh_sequence_index()


def _clip(offset, length, keep_start, keep_stop):
    """Intersect [offset, offset + length) with the kept window.

    Returns (lo, hi) relative to offset; hi <= lo means nothing survives.
    """
    lo = max(keep_start - offset, 0)
    hi = min(keep_stop - offset, length)
    return lo, hi
