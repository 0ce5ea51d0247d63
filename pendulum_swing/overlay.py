"""Text for the status overlay shown next to the pendulum."""

from __future__ import annotations

import math
from typing import List

from pendulum_swing.sim_session import PendulumState

AUDIO_HINT = "Click in the window if no sound is heard"


def format_degrees(angle: float) -> str:
    """Whole degrees, truncated toward zero, right-aligned in 3 columns.

    No range reduction: an angle that wound up several turns shows e.g. 1125.
    """
    return str(int(math.degrees(angle))).rjust(3)


def format_velocity(value: float, signed: bool = True) -> str:
    """Two truncated decimals with a leading sign column, e.g. ' 1.23' or '-0.05'."""
    sign = "-" if signed and value < 0 else " "
    magnitude = abs(value)
    whole = int(magnitude)
    hundredths = int((magnitude - whole) * 100)
    return f"{sign}{whole}.{hundredths:02d}".rjust(5)


def overlay_lines(state: PendulumState) -> List[str]:
    return [
        f"Angle: {format_degrees(state.angle)}°",
        f"Max Angle: {format_degrees(state.max_angle)}°",
        f"Velocity: {format_velocity(state.angular_velocity)}",
        f"Max Velocity: {format_velocity(state.max_velocity, signed=False)}",
    ]


def audio_hint(state: PendulumState) -> str:
    return "" if state.has_user_interacted else AUDIO_HINT
