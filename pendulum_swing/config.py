from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from pendulum_swing.physics import PendulumParams

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


@dataclass
class SimulationConfig:
    """Settings of one running simulation and of the page driving it."""

    params: PendulumParams = field(default_factory=PendulumParams)
    initial_angle: float = math.pi / 4.0  # rad

    # largest step taken after a pause; None keeps the raw frame delta
    max_dt: Optional[float] = 0.05  # s
    frame_interval: float = 1.0 / 30.0  # s between page refreshes

    sample_rate: int = 44100
    tone_duration: float = 0.5  # s
    tone_gain: float = 0.1
    low_hz: float = 440.0  # A4, left-swing peak
    high_hz: float = 880.0  # A5, right-swing peak

    surface_width: float = 700.0  # px
    surface_height: float = 700.0  # px
    visual_length_ratio: float = 0.4  # rod length as share of surface height

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.max_dt is not None and self.max_dt <= 0.0:
            raise ValueError(f"max_dt must be positive or None, got {self.max_dt!r}")
        if self.frame_interval <= 0.0:
            raise ValueError(f"frame_interval must be positive, got {self.frame_interval!r}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SimulationConfig":
        env = os.environ if environ is None else environ
        kwargs = {}
        max_dt = env.get("PENDULUM_MAX_DT")
        if max_dt is not None:
            # "none" or "0" turns the clamp off
            kwargs["max_dt"] = None if max_dt.strip().lower() in ("", "none", "0") else float(max_dt)
        interval = env.get("PENDULUM_FRAME_INTERVAL")
        if interval is not None:
            kwargs["frame_interval"] = float(interval)
        level = env.get("PENDULUM_LOG_LEVEL")
        if level:
            kwargs["log_level"] = level.upper()
        return cls(**kwargs)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
