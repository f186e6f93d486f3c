"""Entry point for the Double Pendulum Smooth Field application.

Animates thousands of nearly identical double pendulums and keeps the
ensemble dense where their trajectories diverge.
"""

import argparse
import logging
import sys

import numpy as np
from PyQt6.QtWidgets import QApplication

from app_window import AppWindow
from field.compute import DEFAULT_CAPACITY, DEFAULT_STEP, FieldConfig


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Render a smoothly resampled field of double pendulums.",
    )
    parser.add_argument(
        "--capacity",
        type=int,
        default=DEFAULT_CAPACITY,
        help=f"Maximum number of samples in the field (default: {DEFAULT_CAPACITY})",
    )
    parser.add_argument(
        "--step",
        type=float,
        default=DEFAULT_STEP,
        help=f"RK4 step size per animation tick (default: {DEFAULT_STEP})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the resampler's random source (default: unseeded)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def main():
    args = parse_args(sys.argv[1:])

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        config = FieldConfig(capacity=args.capacity, step=args.step)
    except ValueError as exc:
        logging.getLogger(__name__).error("Invalid configuration: %s", exc)
        sys.exit(2)
    rng = np.random.default_rng(args.seed) if args.seed is not None else None

    app = QApplication(sys.argv[:1])
    window = AppWindow(config=config, rng=rng)
    window.show()

    # Numba JIT warmup in background (if available)
    _warmup_numba()

    sys.exit(app.exec())


def _warmup_numba():
    """Trigger Numba JIT compilation in background if available."""
    try:
        from field._numba_backend import NumbaBackend
    except ImportError:
        return

    from PyQt6.QtCore import QThread

    class WarmupThread(QThread):
        def run(self):
            NumbaBackend.warmup()
            logging.getLogger(__name__).info("Numba JIT warmup complete")

    # Store reference to prevent GC
    _warmup_numba._thread = WarmupThread()
    _warmup_numba._thread.start()


if __name__ == "__main__":
    main()
