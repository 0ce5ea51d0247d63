from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from pendulum_swing.audio import AudioSink, SilentAudio
from pendulum_swing.config import SimulationConfig
from pendulum_swing.events import EventDetector, SwingEvent
from pendulum_swing.interaction import InteractionController
from pendulum_swing.physics import symplectic_euler_step

logger = logging.getLogger(__name__)

NANOS_PER_SECOND = 1_000_000_000.0


@dataclass
class PendulumState:
    """Mutable state of the pendulum, read by the renderer and the overlay."""

    angle: float = math.pi / 4.0  # rad, from the downward vertical, not wrapped
    angular_velocity: float = 0.0  # rad/s
    angular_acceleration: float = 0.0  # rad/s^2, last computed value
    is_dragging: bool = False
    max_angle: float = 0.0
    max_velocity: float = 0.0
    has_user_interacted: bool = False


@dataclass
class PendulumSession:
    """Holds the per-session simulation state and runs one frame at a time.

    The session does not own a clock: the driver calls `on_frame` with a
    monotonic timestamp once per display refresh.
    """

    config: SimulationConfig = field(default_factory=SimulationConfig)
    audio: AudioSink = field(default_factory=SilentAudio)
    state: PendulumState = field(init=False)

    frame_count: int = 0
    sim_time: float = 0.0
    last_events: List[SwingEvent] = field(default_factory=list)

    _last_timestamp: Optional[int] = field(default=None, init=False, repr=False)
    _prev_angle: float = field(default=0.0, init=False, repr=False)
    _prev_velocity: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.state = PendulumState(angle=self.config.initial_angle)
        self.controller = InteractionController(self.state, self.config.surface_width, self.config.surface_height)
        self.detector = EventDetector()
        self._capture_sample()
        logger.info("pendulum session started at angle %.4f rad", self.state.angle)

    # pointer input

    def drag_start(self) -> None:
        self.controller.drag_start()
        # the zeroed velocity is not a swing reversal
        self._capture_sample()

    def drag_move(self, position: Tuple[float, float]) -> None:
        self.controller.drag_move(position)

    def drag_end(self) -> None:
        self.controller.drag_end()
        # the first free frame starts from the released angle
        self._capture_sample()

    def tap(self) -> None:
        self.controller.tap()

    # frame loop

    def on_frame(self, timestamp_ns: int) -> List[SwingEvent]:
        """Advance the simulation to `timestamp_ns` and return the detected events.

        The first call only records the timestamp. Frames whose timestamp does
        not move forward are skipped.
        """
        last = self._last_timestamp
        self._last_timestamp = timestamp_ns
        if last is None:
            self.last_events = []
            return []
        dt = (timestamp_ns - last) / NANOS_PER_SECOND
        if dt <= 0.0:
            logger.debug("skipping frame with non-positive dt %.6f s", dt)
            self.last_events = []
            return []
        return self.step(dt)

    def step(self, dt: float) -> List[SwingEvent]:
        """Run one frame of `dt` seconds: integrate or hold, then detect events."""
        max_dt = self.config.max_dt
        if max_dt is not None and dt > max_dt:
            logger.debug("clamping dt %.4f s to %.4f s", dt, max_dt)
            dt = max_dt

        s = self.state
        prev_angle = self._prev_angle
        prev_velocity = self._prev_velocity

        if not s.is_dragging:
            s.angle, s.angular_velocity, s.angular_acceleration = symplectic_euler_step(
                s.angle, s.angular_velocity, dt, self.config.params
            )

        events = self.detector.process(prev_angle, prev_velocity, s)
        if s.is_dragging:
            # held pendulum: the live angle is displayed as max
            s.max_angle = s.angle
        self._emit_tones(events)

        self._capture_sample()
        self.sim_time += dt
        self.frame_count += 1
        self.last_events = events
        return events

    def restart_clock(self) -> None:
        """Forget the last timestamp, so the time spent paused is not integrated."""
        self._last_timestamp = None

    def snapshot(self) -> PendulumState:
        """Copy of the state after the last completed frame, for rendering."""
        return replace(self.state)

    def reset(self) -> None:
        interacted = self.state.has_user_interacted
        fresh = PendulumState(angle=self.config.initial_angle, has_user_interacted=interacted)
        for name, value in vars(fresh).items():
            setattr(self.state, name, value)
        self.sim_time = 0.0
        self.frame_count = 0
        self.last_events = []
        self.restart_clock()
        self._capture_sample()
        logger.info("pendulum session reset")

    def _capture_sample(self) -> None:
        self._prev_angle = self.state.angle
        self._prev_velocity = self.state.angular_velocity

    def _emit_tones(self, events: List[SwingEvent]) -> None:
        for event in events:
            try:
                if event is SwingEvent.PEAK_RIGHT:
                    self.audio.play_high()
                elif event is SwingEvent.PEAK_LEFT:
                    self.audio.play_low()
            except Exception:
                # sound must never stop the frame loop
                logger.warning("audio sink failed for %s", event.value, exc_info=True)
