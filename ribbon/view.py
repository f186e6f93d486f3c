"""Ribbon view: orchestrates the simulation, canvas, and controls.

A fixed-interval QTimer drives one Simulation.tick per frame. The tick
runs synchronously on the GUI thread; the canvas only receives a drawing
snapshot after the tick has completed.
"""

import logging

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtWidgets import QWidget, QHBoxLayout, QSplitter, QLabel

from field.compute import FieldConfig
from field.driver import Simulation
from field.ensemble import FieldTooSmallError
from ribbon.canvas import RibbonCanvas
from ribbon.controls import RibbonControls

logger = logging.getLogger(__name__)


class RibbonView(QWidget):
    """Complete ribbon mode: canvas + controls + simulation wiring."""

    TICK_INTERVAL_MS = 16

    def __init__(self, config=None, rng=None, parent=None):
        super().__init__(parent)

        self.canvas = RibbonCanvas()
        self.controls = RibbonControls()

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.canvas)
        splitter.addWidget(self.controls)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(splitter)

        # Status bar labels (AppWindow will place these in a real status bar)
        self.tick_label = QLabel()
        self.time_label = QLabel()
        self.size_label = QLabel()
        self.insert_label = QLabel()

        config = config if config is not None else FieldConfig()
        self.controls.capacity_spin.setValue(config.capacity)
        self._step = config.step
        self._rng = rng
        self._failed = False

        self.simulation = Simulation(
            config,
            self.controls.get_seed_params(),
            rng=rng,
            colormap=self.controls.get_colormap(),
        )

        # Timer
        self.timer = QTimer()
        self.timer.setInterval(self.TICK_INTERVAL_MS)
        self.timer.timeout.connect(self._on_timer)

        # Wire signals
        self.controls.play_btn.clicked.connect(self.toggle_pause)
        self.controls.reset_btn.clicked.connect(self._reset)
        self.controls.colormap_combo.currentTextChanged.connect(
            self._on_colormap_changed
        )

        self._update_display()

    # -- Public interface --

    def activate(self):
        """Start the animation clock."""
        if not self._failed:
            self.timer.start()
        self.canvas.setFocus()

    def deactivate(self):
        self.timer.stop()

    def toggle_pause(self):
        paused = self.simulation.toggle_pause()
        self.controls.set_paused(paused)
        return paused

    # -- Timer --

    def _on_timer(self):
        try:
            self.simulation.tick()
        except FieldTooSmallError:
            logger.exception("Simulation halted; reset with a larger capacity")
            self._failed = True
            self.timer.stop()
            return
        self._update_display()

    def _update_display(self):
        sim = self.simulation
        self.canvas.set_field(sim.field)

        self.tick_label.setText(f"  tick {sim.tick_count}  ")
        self.time_label.setText(f"  t = {sim.elapsed:.3f} s  ")
        self.size_label.setText(f"  samples {len(sim.field)} / {sim.capacity}  ")
        report = sim.last_report
        inserted = report.inserted if report is not None else 0
        self.insert_label.setText(f"  +{inserted} inserted  ")

    # -- Controls --

    def _reset(self):
        was_paused = self.simulation.paused
        config = FieldConfig(
            capacity=self.controls.get_capacity(),
            step=self._step,
        )
        self.simulation = Simulation(
            config,
            self.controls.get_seed_params(),
            backend=self.simulation.backend,
            rng=self._rng,
            colormap=self.controls.get_colormap(),
        )
        if was_paused:
            self.simulation.toggle_pause()
        logger.info(
            "Field reset: capacity=%d, seed=%s", config.capacity, self.simulation.seed,
        )
        self._failed = False
        self._update_display()
        if not self.timer.isActive():
            self.timer.start()

    def _on_colormap_changed(self, _name):
        self.simulation.colormap = self.controls.get_colormap()
        self.simulation.recolor()
        self._update_display()

    # -- Keyboard --

    def keyPressEvent(self, event):
        """S toggles pause; everything else bubbles up."""
        if event.key() == Qt.Key.Key_S:
            self.toggle_pause()
        else:
            super().keyPressEvent(event)
