"""Shared UI widgets for the ribbon view.

Contains PhysicsParamsWidget and reusable slider helpers.
"""

import math

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QWidget, QGridLayout, QSlider, QLabel

from simulation import PendulumParams


# ---------------------------------------------------------------------------
# Slider helpers
# ---------------------------------------------------------------------------

def make_slider(minimum, maximum, value, resolution=100):
    """Create an integer QSlider that maps to float values.

    The slider range is [minimum*resolution, maximum*resolution].
    """
    slider = QSlider(Qt.Orientation.Horizontal)
    slider.setMinimum(int(minimum * resolution))
    slider.setMaximum(int(maximum * resolution))
    slider.setValue(int(value * resolution))
    slider.resolution = resolution
    return slider


def slider_value(slider):
    """Read the float value from a slider created by make_slider."""
    return slider.value() / slider.resolution


def make_log_slider(log_min, log_max, value, steps=1000):
    """Create a slider with log mapping over [log_min, log_max]."""
    slider = QSlider(Qt.Orientation.Horizontal)
    slider.setMinimum(0)
    slider.setMaximum(steps)
    slider.log_min = log_min
    slider.log_max = log_max
    slider.log_steps = steps
    slider.setValue(log_slider_position(slider, value))
    return slider


def log_slider_value(slider):
    t = slider.value() / slider.log_steps
    return slider.log_min * (slider.log_max / slider.log_min) ** t


def log_slider_position(slider, value):
    return log_position(value, slider.log_min, slider.log_max, slider.log_steps)


def log_position(value, log_min, log_max, steps):
    """Integer slider position for value on a log scale, clamped to range."""
    value = min(max(value, log_min), log_max)
    t = math.log(value / log_min) / math.log(log_max / log_min)
    return int(round(t * steps))


# ---------------------------------------------------------------------------
# PhysicsParamsWidget
# ---------------------------------------------------------------------------

class PhysicsParamsWidget(QWidget):
    """Grouped sliders for the shared physics parameters (g, length, mass).

    Emits no signals itself; call get_params() to read current values.
    The parent can connect slider.valueChanged to detect changes.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QGridLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        defaults = PendulumParams()
        self.g_slider = make_slider(0.0, 30.0, defaults.g)
        self.length_slider = make_slider(5.0, 150.0, defaults.length, resolution=1)
        self.mass_slider = make_slider(0.5, 50.0, defaults.mass, resolution=10)

        self._add_row(layout, 0, "g", self.g_slider, " m/s²")
        self._add_row(layout, 1, "L", self.length_slider, " m")
        self._add_row(layout, 2, "m", self.mass_slider, " kg")

    def _add_row(self, layout, row, label_text, slider, unit=""):
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

    def get_params(self):
        """Return a PendulumParams from the current slider values."""
        return PendulumParams(
            g=slider_value(self.g_slider),
            length=slider_value(self.length_slider),
            mass=slider_value(self.mass_slider),
        )

    def set_params(self, params):
        """Set slider positions from a PendulumParams."""
        self.g_slider.setValue(int(params.g * self.g_slider.resolution))
        self.length_slider.setValue(
            int(params.length * self.length_slider.resolution)
        )
        self.mass_slider.setValue(int(params.mass * self.mass_slider.resolution))
