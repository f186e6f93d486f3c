"""Ribbon canvas: QPainter rendering of the whole field.

Each sample is drawn as a two-segment polyline (anchor, first joint,
second joint) in its own color. Composition is additive so thousands of
faint, overlapping pendulums build up into a glowing ribbon.
"""

import numpy as np
from PyQt6.QtCore import Qt, QPointF
from PyQt6.QtGui import QPainter, QPen, QColor, QPolygonF
from PyQt6.QtWidgets import QWidget

# Half-extent of the visible world square along the shorter window side
DEFAULT_VIEW_RANGE = 200.0
ZOOM_FACTOR = 1.1
MIN_VIEW_RANGE = 1.0
MAX_VIEW_RANGE = 1e5


def zoom_range(view_range, steps):
    """Scale the view range by ZOOM_FACTOR**steps (positive zooms out)."""
    new_range = view_range * ZOOM_FACTOR**steps
    return max(MIN_VIEW_RANGE, min(MAX_VIEW_RANGE, new_range))


def world_to_pixel(points, width, height, view_range):
    """Map world coordinates (y up, origin at centre) to pixel coordinates.

    Args:
        points: (..., 2) array of world [x, y].
        width, height: Widget size in pixels.
        view_range: World distance from the centre to the nearest edge.

    Returns:
        (..., 2) float64 array of pixel [px, py].
    """
    points = np.asarray(points, dtype=np.float64)
    scale = min(width, height) / (2.0 * view_range)
    pixels = np.empty_like(points)
    pixels[..., 0] = width / 2 + points[..., 0] * scale
    pixels[..., 1] = height / 2 - points[..., 1] * scale
    return pixels


class RibbonCanvas(QWidget):
    """Custom widget that draws every field sample using QPainter."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.view_range = DEFAULT_VIEW_RANGE
        self._segments = np.zeros((0, 3, 2), dtype=np.float64)
        self._colors = np.zeros((0, 4), dtype=np.float64)
        self.setMinimumSize(400, 400)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

    def set_field(self, field):
        """Take a drawing snapshot of the field; never keeps a reference."""
        self._segments = field.segments()
        self._colors = field.color.copy()
        self.update()

    def zoom(self, steps):
        self.view_range = zoom_range(self.view_range, steps)
        self.update()

    def keyPressEvent(self, event):
        """Alt+Up zooms in, Alt+Down zooms out."""
        alt = event.modifiers() & Qt.KeyboardModifier.AltModifier
        key = event.key()

        if alt and key == Qt.Key.Key_Up:
            self.zoom(-1)
        elif alt and key == Qt.Key.Key_Down:
            self.zoom(1)
        else:
            super().keyPressEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor(0, 0, 0))
        painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Plus)

        pixels = world_to_pixel(
            self._segments, self.width(), self.height(), self.view_range,
        )

        pen = QPen()
        pen.setWidthF(1.0)
        for pts, rgba in zip(pixels, self._colors):
            r, g, b, a = (min(max(float(c), 0.0), 1.0) for c in rgba)
            pen.setColor(QColor.fromRgbF(r, g, b, a))
            painter.setPen(pen)
            painter.drawPolyline(QPolygonF([
                QPointF(pts[0, 0], pts[0, 1]),
                QPointF(pts[1, 0], pts[1, 1]),
                QPointF(pts[2, 0], pts[2, 1]),
            ]))

        painter.end()
