"""Tick driver: one simulation frame over the whole field.

A tick integrates every sample (phase a), refreshes ranks (phase b),
resamples adjacent pairs (phase c) and recolors by rank (phase d).
Phase a always completes before any resampling decision is made.
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np

from field.coloring import index_colors
from field.compute import ComputeBackend, FieldConfig, SeedParams, get_default_backend
from field.ensemble import Field, initialize_field
from field.resampler import ResampleReport, Resampler

logger = logging.getLogger(__name__)


class Simulation:
    """Owns the field, its resampler, and the pause flag.

    The renderer reads `field` between ticks and must not mutate it.
    """

    def __init__(
        self,
        config: FieldConfig | None = None,
        seed: SeedParams | None = None,
        backend: ComputeBackend | None = None,
        rng: np.random.Generator | None = None,
        colormap: Callable[[int, int], np.ndarray] = index_colors,
    ):
        self.config = config if config is not None else FieldConfig()
        self.seed = seed if seed is not None else SeedParams()
        self.backend = backend if backend is not None else get_default_backend()
        self.colormap = colormap
        self.resampler = Resampler(
            self.config.capacity,
            epsilon=self.config.epsilon,
            jitter=self.config.jitter,
            rng=rng,
        )
        self.paused = False
        self.tick_count = 0
        self.elapsed = 0.0
        self.last_report: ResampleReport | None = None
        self.field = self._build_field()

    def _build_field(self) -> Field:
        field = initialize_field(self.config.capacity, self.seed)
        self.recolor(field)
        return field

    # -- Public interface --

    @property
    def capacity(self) -> int:
        return self.config.capacity

    def toggle_pause(self) -> bool:
        """Flip the pause flag and return the new value."""
        self.paused = not self.paused
        logger.info("Simulation %s", "paused" if self.paused else "resumed")
        return self.paused

    def reset(self, seed: SeedParams | None = None) -> None:
        """Reseed the field, optionally with new seed parameters."""
        if seed is not None:
            self.seed = seed
        self.field = self._build_field()
        self.tick_count = 0
        self.elapsed = 0.0
        self.last_report = None

    def recolor(self, field: Field | None = None) -> None:
        """Assign display colors from each sample's rank."""
        field = field if field is not None else self.field
        field.assign_colors(self.colormap(len(field), self.capacity))

    def tick(self, h: float | None = None) -> ResampleReport | None:
        """Advance the field by one frame in place.

        Returns the resampling report, or None when paused.

        Raises:
            FieldTooSmallError: if the field cannot be resampled.
        """
        if self.paused:
            return None

        h = self.config.step if h is None else h
        field = self.field

        field.set_phase(self.backend.step_batch(field.phase, field.physics, h))
        field.refresh_sequence_index()
        report = self.resampler.resample(field)
        self.recolor(field)

        self.tick_count = self.tick_count + 1
        self.elapsed = self.elapsed + h
        self.last_report = report
        return report
