"""Field ensemble: ordered container of trajectory samples.

The field is stored column-wise, one row per sample, so that a whole time
slice can be integrated as a single (N, 4) array. Row order encodes
trajectory adjacency: neighbouring rows were seeded from nearby initial
conditions. Rows are only ever inserted between neighbours or removed from
either end; they are never permuted.

Readers get immutable State snapshots; the arrays themselves are owned by
the field and replaced wholesale by the resampler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from field.compute import MIN_FIELD_SIZE, SeedParams

logger = logging.getLogger(__name__)

# Columns copied verbatim from the left neighbour when a sample is inserted
CARRIED_COLUMNS = ("physics", "anchor", "color")


class FieldTooSmallError(RuntimeError):
    """Raised when the field is too small for neighbour lookups."""


@dataclass(frozen=True, eq=False)
class State:
    """Read-only snapshot of one trajectory sample."""

    g: float
    length: float
    mass: float
    phase: np.ndarray          # (4,) float64 [theta1, theta2, p1, p2]
    x: float
    y: float
    color: tuple               # (r, g, b, a) floats in [0, 1]
    sequence_index: int

    @property
    def theta1(self) -> float:
        return float(self.phase[0])

    @property
    def theta2(self) -> float:
        return float(self.phase[1])

    @property
    def p1(self) -> float:
        return float(self.phase[2])

    @property
    def p2(self) -> float:
        return float(self.phase[3])


class Field:
    """Ordered, capacity-bounded sequence of trajectory samples.

    Columns:
    - phase: (N, 4) float64 [theta1, theta2, p1, p2]
    - physics: (N, 3) float64 [g, length, mass]
    - anchor: (N, 2) float64 [x, y]
    - color: (N, 4) float64 RGBA
    - sequence_index: (N,) int64 rank, refreshed once per tick
    """

    MIN_SIZE = MIN_FIELD_SIZE

    def __init__(
        self,
        phase: np.ndarray,
        physics: np.ndarray,
        anchor: np.ndarray,
        color: np.ndarray,
        capacity: int,
    ):
        self.capacity = capacity
        self.sequence_index = np.zeros(0, dtype=np.int64)
        self.replace_columns(phase, physics, anchor, color)
        self.refresh_sequence_index()

    # -- Construction --

    @classmethod
    def from_states(cls, states, capacity: int) -> Field:
        """Build a field from an ordered iterable of State snapshots."""
        states = list(states)
        phase = np.array([s.phase for s in states], dtype=np.float64).reshape(-1, 4)
        physics = np.array(
            [(s.g, s.length, s.mass) for s in states], dtype=np.float64,
        ).reshape(-1, 3)
        anchor = np.array([(s.x, s.y) for s in states], dtype=np.float64).reshape(-1, 2)
        color = np.array([s.color for s in states], dtype=np.float64).reshape(-1, 4)
        return cls(phase, physics, anchor, color, capacity)

    # -- Sequence protocol --

    def __len__(self) -> int:
        return self.phase.shape[0]

    def __getitem__(self, index: int) -> State:
        n = len(self)
        if index < 0:
            index = index + n
        if not 0 <= index < n:
            raise IndexError(f"field index {index} out of range for size {n}")

        phase = self.phase[index].copy()
        phase.flags.writeable = False
        g, length, mass = self.physics[index]
        x, y = self.anchor[index]
        return State(
            g=float(g),
            length=float(length),
            mass=float(mass),
            phase=phase,
            x=float(x),
            y=float(y),
            color=tuple(float(c) for c in self.color[index]),
            sequence_index=int(self.sequence_index[index]),
        )

    def __iter__(self) -> Iterator[State]:
        return self.states()

    def states(self) -> Iterator[State]:
        """Iterate over State snapshots in sequence order."""
        for i in range(len(self)):
            yield self[i]

    # -- Column views --

    @property
    def theta1(self) -> np.ndarray:
        return self.phase[:, 0]

    @property
    def theta2(self) -> np.ndarray:
        return self.phase[:, 1]

    def segments(self) -> np.ndarray:
        """Return (N, 3, 2) points: anchor, first joint, second joint."""
        x = self.anchor[:, 0]
        y = self.anchor[:, 1]
        length = self.physics[:, 1]

        x1 = x + length * np.sin(self.theta1)
        y1 = y - length * np.cos(self.theta1)
        x2 = x1 + length * np.sin(self.theta2)
        y2 = y1 - length * np.cos(self.theta2)

        points = np.empty((len(self), 3, 2), dtype=np.float64)
        points[:, 0, 0] = x
        points[:, 0, 1] = y
        points[:, 1, 0] = x1
        points[:, 1, 1] = y1
        points[:, 2, 0] = x2
        points[:, 2, 1] = y2
        return points

    def adjacent_gaps(self) -> np.ndarray:
        """Return (N-1, 2) absolute [theta1, theta2] gaps between neighbours."""
        return np.abs(np.diff(self.phase[:, :2], axis=0))

    # -- Mutation (owner only) --

    def set_phase(self, phase: np.ndarray) -> None:
        """Replace every phase-space point; the row count must not change."""
        if phase.shape != self.phase.shape:
            raise ValueError(
                f"phase shape {phase.shape} does not match field {self.phase.shape}"
            )
        self.phase = phase

    def assign_colors(self, colors: np.ndarray) -> None:
        """Replace the per-sample RGBA colors."""
        if colors.shape != self.color.shape:
            raise ValueError(
                f"color shape {colors.shape} does not match field {self.color.shape}"
            )
        self.color = colors

    def refresh_sequence_index(self) -> None:
        """Recompute each sample's rank from its current position."""
        self.sequence_index = np.arange(len(self), dtype=np.int64)

    def replace_columns(self, phase, physics, anchor, color) -> None:
        """Swap in a complete new set of columns (used by the resampler)."""
        n = phase.shape[0]
        expected = {
            "phase": (phase, 4),
            "physics": (physics, 3),
            "anchor": (anchor, 2),
            "color": (color, 4),
        }
        for name, (arr, width) in expected.items():
            if arr.ndim != 2 or arr.shape != (n, width):
                raise ValueError(
                    f"{name} must have shape ({n}, {width}), got {arr.shape}"
                )

        self.phase = np.asarray(phase, dtype=np.float64)
        self.physics = np.asarray(physics, dtype=np.float64)
        self.anchor = np.asarray(anchor, dtype=np.float64)
        self.color = np.asarray(color, dtype=np.float64)

    def require_min_size(self) -> None:
        """Raise FieldTooSmallError if neighbour lookups are impossible."""
        if len(self) < self.MIN_SIZE:
            raise FieldTooSmallError(
                f"Field has {len(self)} samples, need at least {self.MIN_SIZE}"
            )


def interpolate_phase(cur: np.ndarray, nxt: np.ndarray, alpha):
    """Linear interpolation between two phase-space points.

    alpha may be a scalar or a (K,) array; an array yields (K, 4) rows.
    Exact at the endpoints: alpha=0 gives cur, alpha=1 gives nxt.
    """
    alpha = np.asarray(alpha, dtype=np.float64)
    if alpha.ndim == 0:
        return nxt * alpha + cur * (1.0 - alpha)
    a = alpha[:, np.newaxis]
    return nxt[np.newaxis, :] * a + cur[np.newaxis, :] * (1.0 - a)


def initialize_field(capacity: int, seed: SeedParams | None = None) -> Field:
    """Seed a field of `capacity` samples around a near-degenerate cluster.

    Every sample shares physics, anchor and theta1; theta2 is spread
    linearly: theta2_i = seed.theta2 + (seed.spread / capacity) * (i + 1).
    Momenta start at zero and colors at zero (the driver recolors).
    """
    if seed is None:
        seed = SeedParams()
    if capacity < 1:
        raise ValueError(f"capacity must be >= 1, got {capacity}")
    if seed.length <= 0:
        raise ValueError(f"length must be positive, got {seed.length}")
    if seed.mass <= 0:
        raise ValueError(f"mass must be positive, got {seed.mass}")

    ranks = np.arange(capacity, dtype=np.float64)

    phase = np.zeros((capacity, 4), dtype=np.float64)
    phase[:, 0] = seed.theta1
    phase[:, 1] = seed.theta2 + (seed.spread / capacity) * (ranks + 1.0)

    physics = np.empty((capacity, 3), dtype=np.float64)
    physics[:, 0] = seed.g
    physics[:, 1] = seed.length
    physics[:, 2] = seed.mass

    anchor = np.empty((capacity, 2), dtype=np.float64)
    anchor[:, 0] = seed.x
    anchor[:, 1] = seed.y

    color = np.zeros((capacity, 4), dtype=np.float64)

    logger.info(
        "Seeded field: %d samples, theta1=%.4f, theta2=%.4f +%.2e",
        capacity, seed.theta1, seed.theta2, seed.spread,
    )
    return Field(phase, physics, anchor, color, capacity)
