"""Double pendulum physics engine.

Implements the Hamiltonian equations of motion for a double pendulum made
of two identical uniform rods, a fixed-step RK4 stepper for a single
phase-space point, and a high-accuracy reference integration via SciPy's
solve_ivp (DOP853).

Phase-space point: [theta1, theta2, p1, p2] (angles and conjugate momenta).
"""

from dataclasses import dataclass

import numpy as np
from scipy.integrate import solve_ivp


@dataclass(frozen=True)
class PendulumParams:
    """Physical parameters shared by both arms of the pendulum."""

    g: float = 10.0
    length: float = 75.0
    mass: float = 10.0

    def __post_init__(self):
        if self.length <= 0:
            raise ValueError(f"length must be positive, got {self.length}")
        if self.mass <= 0:
            raise ValueError(f"mass must be positive, got {self.mass}")


def make_phase_point(theta1, theta2, p1=0.0, p2=0.0):
    """Build a float64 phase-space point [theta1, theta2, p1, p2]."""
    return np.array([theta1, theta2, p1, p2], dtype=np.float64)


def derivatives(state, params):
    """Compute d/dt of a phase-space point under the double pendulum Hamiltonian.

    State vector: [theta1, theta2, p1, p2]
    Returns: float64 array [d_theta1/dt, d_theta2/dt, d_p1/dt, d_p2/dt]

    The denominator 16 - 9 cos^2(delta) never reaches zero for real angles.
    """
    theta1, theta2, p1, p2 = state
    g, length, mass = params.g, params.length, params.mass

    ml2 = mass * length * length
    delta = theta1 - theta2
    cos_delta = np.cos(delta)
    sin_delta = np.sin(delta)
    denom = 16.0 - 9.0 * cos_delta**2

    theta1_dot = (6.0 / ml2) * (2.0 * p1 - 3.0 * p2 * cos_delta) / denom
    theta2_dot = (6.0 / ml2) * (8.0 * p2 - 3.0 * p1 * cos_delta) / denom

    p1_dot = -0.5 * ml2 * (
        theta1_dot * theta2_dot * sin_delta + 3.0 * (g / length) * np.sin(theta1)
    )
    p2_dot = -0.5 * ml2 * (
        -theta1_dot * theta2_dot * sin_delta + (g / length) * np.sin(theta2)
    )

    return np.array([theta1_dot, theta2_dot, p1_dot, p2_dot], dtype=np.float64)


def rk4_step(state, params, h):
    """Advance one phase-space point by a single classical RK4 step.

    Returns a new array; the input is not modified.
    """
    state = np.asarray(state, dtype=np.float64)

    k1 = derivatives(state, params)
    k2 = derivatives(state + 0.5 * h * k1, params)
    k3 = derivatives(state + 0.5 * h * k2, params)
    k4 = derivatives(state + h * k3, params)

    return state + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


def simulate(params, theta1_0, theta2_0, p1_0=0.0, p2_0=0.0,
             t_end=1.0, dt=0.0125):
    """Run a reference simulation and return uniformly-spaced results.

    Returns:
        t_array: 1D array of time values at uniform dt spacing
        state_array: 2D array of shape (len(t_array), 4)
    """
    t_eval = np.arange(0, t_end, dt)
    y0 = [theta1_0, theta2_0, p1_0, p2_0]

    sol = solve_ivp(
        fun=lambda t, y: derivatives(y, params),
        t_span=(0, t_end),
        y0=y0,
        method="DOP853",
        t_eval=t_eval,
        rtol=1e-12,
        atol=1e-12,
    )

    return sol.t, sol.y.T  # shape: (n_steps, 4)


def positions(state, params, x=0.0, y=0.0):
    """Convert a phase-space point to the Cartesian joint positions.

    (x, y) is the anchor; y points up, so a hanging arm has y1 < y.
    Returns (x1, y1, x2, y2).
    """
    theta1, theta2 = state[0], state[1]
    length = params.length

    x1 = x + length * np.sin(theta1)
    y1 = y - length * np.cos(theta1)

    x2 = x1 + length * np.sin(theta2)
    y2 = y1 - length * np.cos(theta2)

    return x1, y1, x2, y2


def total_energy(state, params):
    """Compute the Hamiltonian H = T + V for a single phase-space point.

    Potential energy is measured from the anchor (y=0).
    """
    theta1, theta2 = state[0], state[1]
    g, length, mass = params.g, params.length, params.mass

    theta1_dot, theta2_dot, _, _ = derivatives(state, params)

    # Kinetic energy of two uniform rods
    T = (mass * length**2 / 6.0) * (
        theta2_dot**2
        + 4.0 * theta1_dot**2
        + 3.0 * theta1_dot * theta2_dot * np.cos(theta1 - theta2)
    )

    # Potential energy (centres of mass at L/2 and L + L/2)
    V = -0.5 * mass * g * length * (3.0 * np.cos(theta1) + np.cos(theta2))

    return T + V
