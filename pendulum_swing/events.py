"""
Swing event detection on the per-frame sampled trajectory.

Events are found by comparing the sample captured before a frame's update with
the sample after it:

- peak-right: velocity goes from positive to zero or negative
- peak-left: velocity goes from negative to zero or positive
- zero-crossing: the angle changes sign (bottom of the swing)

The checks are independent and may fire together on the same pair.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from pendulum_swing.sim_session import PendulumState


class SwingEvent(str, enum.Enum):
    PEAK_RIGHT = "peak-right"
    PEAK_LEFT = "peak-left"
    ZERO_CROSSING = "zero-crossing"


def detect_events(prev_angle: float, prev_velocity: float, angle: float, angular_velocity: float) -> List[SwingEvent]:
    """Return the events between two consecutive samples, in a fixed order."""
    events: List[SwingEvent] = []
    if prev_velocity > 0.0 and angular_velocity <= 0.0:
        events.append(SwingEvent.PEAK_RIGHT)
    if prev_velocity < 0.0 and angular_velocity >= 0.0:
        events.append(SwingEvent.PEAK_LEFT)
    if (prev_angle > 0.0 and angle <= 0.0) or (prev_angle < 0.0 and angle >= 0.0):
        events.append(SwingEvent.ZERO_CROSSING)
    return events


class EventDetector:
    """Detects swing events and records them into the display state.

    Only right-swing peaks update `max_angle`; left-swing peaks just produce
    their tone.
    """

    def process(self, prev_angle: float, prev_velocity: float, state: "PendulumState") -> List[SwingEvent]:
        events = detect_events(prev_angle, prev_velocity, state.angle, state.angular_velocity)
        for event in events:
            if event is SwingEvent.PEAK_RIGHT:
                state.max_angle = state.angle
            elif event is SwingEvent.ZERO_CROSSING:
                state.max_velocity = abs(state.angular_velocity)
        return events
