"""App window: hosts the ribbon view with a status bar.

Owns window-level shortcuts (Esc quits); everything simulation-related
lives in RibbonView.
"""

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QMainWindow, QStatusBar, QLabel

from ribbon.view import RibbonView

logger = logging.getLogger(__name__)


class AppWindow(QMainWindow):
    """Top-level window for the double pendulum smooth field."""

    def __init__(self, config=None, rng=None):
        super().__init__()
        self.setWindowTitle("Double Pendulum Smooth Field")
        self.resize(1200, 800)

        # --- View ---
        self.ribbon_view = RibbonView(config=config, rng=rng)
        self.setCentralWidget(self.ribbon_view)

        # --- Status bar ---
        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)

        self._status_bar.addWidget(self.ribbon_view.tick_label)
        self._status_bar.addWidget(self.ribbon_view.time_label)
        self._status_bar.addWidget(self.ribbon_view.size_label)
        self._status_bar.addWidget(self.ribbon_view.insert_label)

        self._backend_label = QLabel()
        backend_name = type(self.ribbon_view.simulation.backend).__name__
        self._backend_label.setText(f"  Backend: {backend_name}  ")
        self._status_bar.addPermanentWidget(self._backend_label)

        self.ribbon_view.activate()

    def keyPressEvent(self, event):
        if event.key() == Qt.Key.Key_Escape:
            logger.info("Escape pressed, closing")
            self.close()
        elif event.key() == Qt.Key.Key_S:
            self.ribbon_view.toggle_pause()
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event):
        self.ribbon_view.deactivate()
        super().closeEvent(event)
