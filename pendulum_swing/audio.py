"""
Audio sinks for the swing tones.

The simulation only needs two fire-and-forget operations: play the low tone
(left-swing peak) and play the high tone (right-swing peak). Implementations:

- SilentAudio: does nothing
- RecordingAudio: remembers the calls, for tests
- ToneAudio: synthesizes short sine clips with numpy and queues them for the
  page to play back
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Protocol

import numpy as np

# near-silent end level of the exponential gain ramp
ENVELOPE_FLOOR = 0.0001


class AudioSink(Protocol):
    def play_low(self) -> None:
        ...

    def play_high(self) -> None:
        ...


class SilentAudio:
    """No-op sink used when sound is disabled."""

    def play_low(self) -> None:
        pass

    def play_high(self) -> None:
        pass


class RecordingAudio:
    """Sink that records which tones were requested."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    def play_low(self) -> None:
        self.calls.append("low")

    def play_high(self) -> None:
        self.calls.append("high")


def synthesize_tone(
    frequency: float,
    duration: float = 0.5,
    sample_rate: int = 44100,
    gain: float = 0.1,
    floor: float = ENVELOPE_FLOOR,
) -> np.ndarray:
    """Return a mono float32 sine clip with an exponential decay envelope.

    The envelope starts at `gain` and ramps exponentially down to `floor` at
    the end of the clip, which avoids a click when the tone stops.
    """
    n = max(1, int(round(duration * sample_rate)))
    t = np.arange(n, dtype=np.float64) / float(sample_rate)
    ratio = floor / gain
    envelope = gain * np.power(ratio, t / duration)
    wave = np.sin(2.0 * np.pi * frequency * t) * envelope
    return wave.astype(np.float32)


@dataclass
class ToneClip:
    name: str
    frequency: float
    samples: np.ndarray
    sample_rate: int


class ToneAudio:
    """Tone generator that queues clips for playback.

    Clips are synthesized once and reused. The page drains the queue after each
    frame and hands the clips to the browser; overlapping requests simply queue
    up to `max_pending` clips, older ones are dropped.
    """

    def __init__(
        self,
        low_hz: float = 440.0,
        high_hz: float = 880.0,
        duration: float = 0.5,
        sample_rate: int = 44100,
        gain: float = 0.1,
        max_pending: int = 4,
    ) -> None:
        self.sample_rate = int(sample_rate)
        self.low = ToneClip("low", low_hz, synthesize_tone(low_hz, duration, self.sample_rate, gain), self.sample_rate)
        self.high = ToneClip("high", high_hz, synthesize_tone(high_hz, duration, self.sample_rate, gain), self.sample_rate)
        self._pending: Deque[ToneClip] = deque(maxlen=max_pending)

    def play_low(self) -> None:
        self._pending.append(self.low)

    def play_high(self) -> None:
        self._pending.append(self.high)

    def drain(self) -> List[ToneClip]:
        clips = list(self._pending)
        self._pending.clear()
        return clips

    @property
    def pending(self) -> int:
        return len(self._pending)
