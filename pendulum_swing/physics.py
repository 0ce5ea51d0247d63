"""
Numerical physics utilities for the single damped pendulum.

This module provides:
- The equation of motion of a damped simple pendulum
- A semi-implicit (symplectic) Euler step
- Energy computation for integrator sanity checks
- Position and pointer helpers for visualization and dragging
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

Point = Tuple[float, float]


@dataclass(frozen=True)
class PendulumParams:
    """Fixed physical parameters of the simulated pendulum."""

    g: float = 9.81  # m/s^2
    length: float = 2.0  # m
    damping: float = 0.01  # 1/s

    def __post_init__(self) -> None:
        if not self.length > 0.0:
            raise ValueError(f"pendulum length must be positive, got {self.length!r}")
        if self.damping < 0.0:
            raise ValueError(f"damping must not be negative, got {self.damping!r}")


DEFAULT_PARAMS = PendulumParams()


def angular_acceleration(angle: float, angular_velocity: float, params: PendulumParams = DEFAULT_PARAMS) -> float:
    """Return the angular acceleration of the pendulum.

    Angles are measured from the vertical (downwards is 0 rad). Damping is linear.
    """
    return -(params.g / params.length) * math.sin(angle) - params.damping * angular_velocity


def symplectic_euler_step(
    angle: float,
    angular_velocity: float,
    dt: float,
    params: PendulumParams = DEFAULT_PARAMS,
) -> Tuple[float, float, float]:
    """Symplectic (semi-implicit) Euler step.

    The angular velocity is updated from the acceleration first, then the angle
    from the new velocity. Returns (angle, angular_velocity, angular_acceleration).
    The angle is not wrapped.
    """
    alpha = angular_acceleration(angle, angular_velocity, params)
    omega = angular_velocity + alpha * dt
    theta = angle + omega * dt
    return theta, omega, alpha


def total_energy(angle: float, angular_velocity: float, params: PendulumParams = DEFAULT_PARAMS, mass: float = 1.0) -> float:
    """Total mechanical energy (kinetic + potential).

    Reference y=0 at the pivot, the bob hangs at y = -L at rest.
    """
    l = params.length
    kinetic = 0.5 * mass * (l * angular_velocity) ** 2
    potential = -mass * params.g * l * math.cos(angle)
    return kinetic + potential


def bob_position(pivot: Point, angle: float, length: float) -> Point:
    """Screen position of the bob for a rod of `length` pixels.

    Screen y grows downwards, so angle 0 hangs straight below the pivot and a
    positive angle swings towards positive x.
    """
    px, py = pivot
    return (px + length * math.sin(angle), py + length * math.cos(angle))


def pointer_angle(pivot: Point, point: Point) -> float:
    """Angle from the downward vertical of the ray pivot -> point.

    dx is the sine component and dy the cosine component. A pointer exactly on
    the pivot gives 0.
    """
    dx = float(point[0]) - float(pivot[0])
    dy = float(point[1]) - float(pivot[1])
    return math.atan2(dx, dy)
