import logging
import math

import pytest

from pendulum_swing.audio import RecordingAudio
from pendulum_swing.config import SimulationConfig
from pendulum_swing.events import SwingEvent
from pendulum_swing.physics import symplectic_euler_step
from pendulum_swing.sim_session import PendulumSession

FRAME_NS = 16_666_667


class BrokenAudio:
    def play_low(self):
        raise RuntimeError("no audio device")

    def play_high(self):
        raise RuntimeError("no audio device")


@pytest.fixture
def audio():
    return RecordingAudio()


@pytest.fixture
def session(audio):
    return PendulumSession(config=SimulationConfig(), audio=audio)


def run_frames(session, count, start_ns=0, step_ns=FRAME_NS):
    events = []
    t = start_ns
    for _ in range(count):
        events.extend(session.on_frame(t))
        t += step_ns
    return events, t


def test_initial_state(session):
    s = session.state
    assert s.angle == pytest.approx(math.pi / 4)
    assert s.angular_velocity == 0.0
    assert s.angular_acceleration == 0.0
    assert s.max_angle == 0.0
    assert s.max_velocity == 0.0
    assert not s.is_dragging
    assert not s.has_user_interacted


def test_first_frame_only_captures_timestamp(session):
    assert session.on_frame(123_000_000) == []
    assert session.state.angle == pytest.approx(math.pi / 4)
    assert session.frame_count == 0


def test_frame_delta_drives_integration(session):
    session.on_frame(1_000_000_000)
    session.on_frame(1_000_000_000 + 20_000_000)
    theta, omega, alpha = symplectic_euler_step(math.pi / 4, 0.0, 0.02)
    assert session.state.angle == pytest.approx(theta)
    assert session.state.angular_velocity == pytest.approx(omega)
    assert session.state.angular_acceleration == pytest.approx(alpha)
    assert session.sim_time == pytest.approx(0.02)


def test_non_increasing_timestamp_is_skipped(session):
    session.on_frame(5_000_000_000)
    session.on_frame(5_000_000_000)
    session.on_frame(4_000_000_000)
    assert session.state.angle == pytest.approx(math.pi / 4)
    assert session.frame_count == 0


def test_long_pause_is_clamped(session):
    session.on_frame(0)
    session.on_frame(30 * 1_000_000_000)
    theta, _, _ = symplectic_euler_step(math.pi / 4, 0.0, 0.05)
    assert session.state.angle == pytest.approx(theta)
    assert session.sim_time == pytest.approx(0.05)


def test_clamp_can_be_disabled(audio):
    session = PendulumSession(config=SimulationConfig(max_dt=None), audio=audio)
    session.step(0.5)
    theta, _, _ = symplectic_euler_step(math.pi / 4, 0.0, 0.5)
    assert session.state.angle == pytest.approx(theta)


def test_free_swing_plays_both_tones_and_tracks_maxima(session, audio):
    events, _ = run_frames(session, 600)
    assert SwingEvent.PEAK_LEFT in events
    assert SwingEvent.PEAK_RIGHT in events
    assert SwingEvent.ZERO_CROSSING in events
    assert audio.calls.count("low") == events.count(SwingEvent.PEAK_LEFT)
    assert audio.calls.count("high") == events.count(SwingEvent.PEAK_RIGHT)
    # right peaks sit near the starting amplitude, slightly damped
    assert 0.7 < session.state.max_angle <= math.pi / 4
    assert session.state.max_velocity > 0.0


def test_first_tone_is_low_after_release_from_right(session, audio):
    run_frames(session, 200)
    assert audio.calls[0] == "low"


def test_dragging_suspends_integration(session, audio):
    _, t = run_frames(session, 10)
    session.drag_start()
    session.drag_move((500.0, 233.33333333333334))
    held = session.state.angle
    for _ in range(30):
        session.on_frame(t)
        t += FRAME_NS
    assert session.state.angle == held
    assert session.state.angular_velocity == 0.0
    assert session.state.max_angle == held
    assert audio.calls == []


def test_grab_while_swinging_plays_no_tone(session, audio):
    _, t = run_frames(session, 20)
    assert session.state.angular_velocity < 0.0
    audio.calls.clear()
    session.drag_start()
    events = session.on_frame(t)
    assert SwingEvent.PEAK_LEFT not in events
    assert audio.calls == []


def test_dragging_across_vertical_records_zero_speed(session):
    _, t = run_frames(session, 2)
    session.drag_start()
    session.drag_move((450.0, 400.0))
    session.on_frame(t)
    session.drag_move((250.0, 400.0))
    events = session.on_frame(t + FRAME_NS)
    assert SwingEvent.ZERO_CROSSING in events
    assert session.state.max_velocity == 0.0


def test_release_starts_from_rest(session):
    _, t = run_frames(session, 5)
    session.drag_start()
    session.drag_move((250.0, 233.33333333333334))
    session.on_frame(t)
    session.drag_end()
    assert session.state.angular_velocity == 0.0
    released = session.state.angle
    session.on_frame(t + FRAME_NS)
    theta, _, _ = symplectic_euler_step(released, 0.0, FRAME_NS / 1e9)
    assert session.state.angle == pytest.approx(theta)


def test_audio_failure_does_not_stop_frames(caplog):
    session = PendulumSession(audio=BrokenAudio())
    with caplog.at_level(logging.WARNING, logger="pendulum_swing.sim_session"):
        events, _ = run_frames(session, 300)
    assert SwingEvent.PEAK_LEFT in events
    assert session.frame_count == 299
    assert "audio sink failed" in caplog.text


def test_snapshot_is_a_copy(session):
    snap = session.snapshot()
    snap.angle = 3.0
    assert session.state.angle == pytest.approx(math.pi / 4)


def test_reset_restores_initial_state_but_keeps_interaction(session):
    run_frames(session, 50)
    session.tap()
    session.reset()
    s = session.state
    assert s.angle == pytest.approx(math.pi / 4)
    assert s.angular_velocity == 0.0
    assert s.max_angle == 0.0
    assert s.has_user_interacted
    assert session.sim_time == 0.0
    assert session.on_frame(10**12) == []


def test_release_between_frames_compares_against_released_angle(session):
    session.on_frame(0)
    session.drag_start()
    session.drag_move((450.0, 400.0))
    session.on_frame(FRAME_NS)
    # crosses the vertical and lets go before the next frame
    session.drag_move((250.0, 400.0))
    session.drag_end()
    events = session.on_frame(2 * FRAME_NS)
    assert SwingEvent.ZERO_CROSSING not in events
    assert session.state.max_velocity == 0.0
    assert session.state.angle < 0.0


def test_last_events_mirror_the_frame_result(session):
    events, t = run_frames(session, 120)
    assert SwingEvent.ZERO_CROSSING in events
    returned = session.on_frame(t)
    assert session.last_events == returned
    session.on_frame(t)
    assert session.last_events == []
