"""Ribbon control panel: seed conditions, physics, capacity, playback.

Uses PhysicsParamsWidget from ui_common for the shared physics parameters.
Seed changes only take effect on Reset; the running field is never
reseeded behind the user's back.
"""

import math

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QGridLayout, QHBoxLayout,
    QLabel, QPushButton, QComboBox, QGroupBox, QSpinBox,
)

from field.coloring import COLORMAPS
from field.compute import DEFAULT_CAPACITY, MIN_FIELD_SIZE, SeedParams
from ui_common import (
    make_slider, slider_value, make_log_slider, log_slider_value,
    PhysicsParamsWidget,
)


class RibbonControls(QWidget):
    """Sliders for seed conditions and system parameters, plus playback."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._init_ui()

    @staticmethod
    def _format_spread(value):
        if value < 0.01:
            return f"{value:.1e} rad"
        return f"{value:.3f} rad"

    def _add_param_row(self, layout, row, label_text, slider, unit=""):
        label = QLabel(label_text)
        value_label = QLabel()
        value_label.setMinimumWidth(70)
        value_label.setAlignment(
            Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        )
        layout.addWidget(label, row, 0)
        layout.addWidget(slider, row, 1)
        layout.addWidget(value_label, row, 2)

        def _update(_val, vl=value_label, sl=slider, u=unit):
            vl.setText(f"{slider_value(sl):.2f}{u}")

        slider.valueChanged.connect(_update)
        _update(slider.value())

    # -- UI construction --

    def _init_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(8, 8, 8, 8)

        defaults = SeedParams()

        # --- Seed ---
        seed_group = QGroupBox("Seed")
        seed_layout = QGridLayout()
        seed_group.setLayout(seed_layout)

        self.theta1_slider = make_slider(-math.pi, math.pi, defaults.theta1)
        self.theta2_slider = make_slider(-math.pi, math.pi, defaults.theta2)
        self.spread_slider = make_log_slider(1e-8, 1.0, defaults.spread)

        self._add_param_row(seed_layout, 0, "θ1₀", self.theta1_slider, " rad")
        self._add_param_row(seed_layout, 1, "θ2₀", self.theta2_slider, " rad")

        spread_label = QLabel("θ2 spread")
        self.spread_value = QLabel()
        self.spread_value.setMinimumWidth(70)
        self.spread_value.setAlignment(
            Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        )
        seed_layout.addWidget(spread_label, 2, 0)
        seed_layout.addWidget(self.spread_slider, 2, 1)
        seed_layout.addWidget(self.spread_value, 2, 2)
        self.spread_slider.valueChanged.connect(self._update_spread_label)
        self._update_spread_label()

        main_layout.addWidget(seed_group)

        # --- System Parameters ---
        sys_group = QGroupBox("System Parameters")
        sys_layout = QVBoxLayout()
        sys_group.setLayout(sys_layout)
        self.physics_params = PhysicsParamsWidget()
        sys_layout.addWidget(self.physics_params)
        main_layout.addWidget(sys_group)

        # --- Field ---
        field_group = QGroupBox("Field")
        field_layout = QGridLayout()
        field_group.setLayout(field_layout)

        self.capacity_spin = QSpinBox()
        self.capacity_spin.setRange(MIN_FIELD_SIZE, 65536)
        self.capacity_spin.setSingleStep(256)
        self.capacity_spin.setValue(DEFAULT_CAPACITY)
        field_layout.addWidget(QLabel("Capacity"), 0, 0)
        field_layout.addWidget(self.capacity_spin, 0, 1)

        self.colormap_combo = QComboBox()
        for name in COLORMAPS:
            self.colormap_combo.addItem(name)
        field_layout.addWidget(QLabel("Colormap"), 1, 0)
        field_layout.addWidget(self.colormap_combo, 1, 1)

        main_layout.addWidget(field_group)

        # --- Playback ---
        pb_group = QGroupBox("Playback")
        pb_layout = QHBoxLayout()
        pb_group.setLayout(pb_layout)

        self.play_btn = QPushButton("Pause")
        self.reset_btn = QPushButton("Reset")
        pb_layout.addWidget(self.play_btn)
        pb_layout.addWidget(self.reset_btn)

        main_layout.addWidget(pb_group)

        hint = QLabel("S: pause/resume   Alt+↑/↓: zoom   Esc: quit")
        hint.setStyleSheet("color: #888;")
        main_layout.addWidget(hint)
        main_layout.addStretch()

    def _update_spread_label(self, _val=None):
        self.spread_value.setText(
            self._format_spread(log_slider_value(self.spread_slider))
        )

    # -- Public accessors --

    def get_seed_params(self):
        """Return SeedParams from the current slider values."""
        params = self.physics_params.get_params()
        return SeedParams(
            g=params.g,
            length=params.length,
            mass=params.mass,
            theta1=slider_value(self.theta1_slider),
            theta2=slider_value(self.theta2_slider),
            spread=log_slider_value(self.spread_slider),
        )

    def get_capacity(self):
        return self.capacity_spin.value()

    def get_colormap(self):
        return COLORMAPS[self.colormap_combo.currentText()]

    def set_paused(self, paused):
        self.play_btn.setText("Play" if paused else "Pause")
