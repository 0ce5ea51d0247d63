"""
Pointer interaction: grabbing, dragging and releasing the pendulum.

While a drag is active the pointer position decides the angle directly and
the integrator is bypassed by the session.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Tuple

from pendulum_swing.physics import Point, pointer_angle

if TYPE_CHECKING:
    from pendulum_swing.sim_session import PendulumState

logger = logging.getLogger(__name__)


class InteractionController:
    """Maps drag gestures on the drawing surface to pendulum state changes."""

    def __init__(self, state: "PendulumState", width: float, height: float) -> None:
        self.state = state
        self.width = float(width)
        self.height = float(height)

    @property
    def pivot(self) -> Point:
        # horizontal center, one third down from the top
        return (self.width / 2.0, self.height / 3.0)

    def drag_start(self) -> None:
        s = self.state
        s.is_dragging = True
        s.angular_velocity = 0.0
        s.max_angle = 0.0
        s.max_velocity = 0.0
        s.has_user_interacted = True
        logger.debug("drag started at angle %.4f rad", s.angle)

    def drag_move(self, position: Tuple[float, float]) -> None:
        s = self.state
        if not s.is_dragging:
            logger.debug("ignoring pointer move without active drag")
            return
        s.angle = pointer_angle(self.pivot, position)
        # live angle shown as max while the pendulum is held
        s.max_angle = s.angle

    def drag_end(self) -> None:
        # no throw velocity: the pendulum starts from rest at the released angle
        self.state.is_dragging = False
        logger.debug("drag ended at angle %.4f rad", self.state.angle)

    def tap(self) -> None:
        self.state.has_user_interacted = True
