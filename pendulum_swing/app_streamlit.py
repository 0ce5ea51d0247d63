from __future__ import annotations

import logging
import time
from typing import Any, MutableMapping, Optional, Tuple

import numpy as np
import plotly.graph_objects as go
import streamlit as st

from pendulum_swing.audio import ToneAudio
from pendulum_swing.config import SimulationConfig, configure_logging
from pendulum_swing.overlay import audio_hint, overlay_lines
from pendulum_swing.physics import Point, bob_position
from pendulum_swing.sim_session import PendulumSession, PendulumState

logger = logging.getLogger(__name__)

GRAB_GRID_STEP = 20.0  # px between clickable points of the surface
PLOT_KEY = "pendulum_plot"
PICK_KEY = "last_pick"
TONE_KEY = "tone"


def _ensure_session() -> PendulumSession:
    if "sim" not in st.session_state:
        config = SimulationConfig.from_env()
        configure_logging(config.log_level)
        audio = ToneAudio(
            low_hz=config.low_hz,
            high_hz=config.high_hz,
            duration=config.tone_duration,
            sample_rate=config.sample_rate,
            gain=config.tone_gain,
        )
        st.session_state.sim = PendulumSession(config=config, audio=audio)
    if "running" not in st.session_state:
        st.session_state.running = True
    if "grabbing" not in st.session_state:
        st.session_state.grabbing = False
    if "sound" not in st.session_state:
        st.session_state.sound = True
    return st.session_state.sim


def _grab_grid(width: float, height: float) -> Tuple[np.ndarray, np.ndarray]:
    xs = np.arange(0.0, width + GRAB_GRID_STEP, GRAB_GRID_STEP)
    ys = np.arange(0.0, height + GRAB_GRID_STEP, GRAB_GRID_STEP)
    gx, gy = np.meshgrid(xs, ys)
    return gx.ravel(), gy.ravel()


def build_figure(state: PendulumState, pivot: Point, width: float, height: float, visual_length: float) -> go.Figure:
    """Draw rod, pivot and bob in screen coordinates (y grows downwards)."""
    bx, by = bob_position(pivot, state.angle, visual_length)
    px, py = pivot

    fig = go.Figure()

    # invisible points covering the surface, so a click reports a position
    grid_x, grid_y = _grab_grid(width, height)
    fig.add_trace(go.Scatter(x=grid_x, y=grid_y, mode="markers", marker=dict(size=GRAB_GRID_STEP, opacity=0.0), hoverinfo="none", showlegend=False, name="surface"))

    # rod
    fig.add_trace(go.Scatter(x=[px, bx], y=[py, by], mode="lines", line=dict(color="#D3D3D3", width=4), hoverinfo="skip", showlegend=False))
    # pivot
    fig.add_trace(go.Scatter(x=[px], y=[py], mode="markers", marker=dict(size=16, color="#FFFFFF"), hoverinfo="skip", showlegend=False))
    # bob, neon cyan
    fig.add_trace(go.Scatter(x=[bx], y=[by], mode="markers", marker=dict(size=80, color="#00E5FF", line=dict(color="#008299", width=6)), hoverinfo="skip", showlegend=False))

    fig.update_layout(
        template="plotly_dark",
        paper_bgcolor="#121212",
        plot_bgcolor="#121212",
        margin=dict(l=10, r=10, t=10, b=10),
        xaxis=dict(range=[0.0, width], visible=False, fixedrange=True),
        yaxis=dict(range=[height, 0.0], visible=False, fixedrange=True, scaleanchor="x", scaleratio=1.0),
        dragmode=False,
        clickmode="event+select",
        height=int(height),
    )
    return fig


def _selected_position(event: Any) -> Optional[Tuple[float, float]]:
    try:
        points = event["selection"]["points"]
    except (KeyError, TypeError):
        return None
    if not points:
        return None
    last = points[-1]
    return (float(last["x"]), float(last["y"]))


def _update_controls(sim: PendulumSession) -> None:
    col_a, col_b, col_c = st.columns([1, 1, 1])
    with col_a:
        if not st.session_state.get("running", False):
            if st.button("Start", type="primary"):
                st.session_state.running = True
                sim.restart_clock()
                sim.tap()
        else:
            if st.button("Stop", type="secondary"):
                st.session_state.running = False
                sim.tap()
    with col_b:
        if st.button("Reset"):
            sim.reset()
            sim.tap()
    with col_c:
        st.session_state.sound = st.toggle("Ton", value=bool(st.session_state.sound))

    grabbing = st.toggle("Pendel greifen (in die Fläche klicken, um es zu bewegen)", value=bool(st.session_state.grabbing))
    if grabbing and not sim.state.is_dragging:
        sim.drag_start()
    elif not grabbing and sim.state.is_dragging:
        sim.drag_end()
    st.session_state.grabbing = grabbing


def _handle_pick(sim: PendulumSession, event: Any, store: Optional[MutableMapping[str, Any]] = None) -> None:
    """Forward a click on the figure, once per new selection.

    The chart keeps its selection across reruns, so a point that was already
    handled is ignored.
    """
    store = st.session_state if store is None else store
    position = _selected_position(event)
    if position == store.get(PICK_KEY):
        return
    store[PICK_KEY] = position
    if position is None:
        return
    if sim.state.is_dragging:
        sim.drag_move(position)
    else:
        sim.tap()


def _play_pending_tones(sim: PendulumSession, now: Optional[float] = None) -> None:
    """Show the current tone until it has finished playing.

    The element is drawn again on every run at the same position with the same
    data, so the browser keeps playing it instead of starting over.
    """
    now = time.monotonic() if now is None else now
    audio = sim.audio
    if isinstance(audio, ToneAudio):
        clips = audio.drain()
        if clips and st.session_state.get("sound", True):
            # one element per run, the newest tone wins
            st.session_state[TONE_KEY] = (clips[-1], now + sim.config.tone_duration)
    playing = st.session_state.get(TONE_KEY)
    if playing is None:
        return
    clip, expires = playing
    if now >= expires:
        del st.session_state[TONE_KEY]
        return
    try:
        st.audio(clip.samples, sample_rate=clip.sample_rate, autoplay=True)
    except Exception:
        logger.warning("could not play %s tone", clip.name, exc_info=True)


def _frame_view(sim: PendulumSession) -> None:
    config = sim.config
    if st.session_state.get("running", False):
        try:
            sim.on_frame(time.perf_counter_ns())
        except Exception as exc:
            # on any runtime error, pause to avoid tight loop
            logger.exception("frame step failed")
            st.session_state.running = False
            st.error(f"Simulation angehalten: {exc}")

    state = sim.snapshot()
    col_plot, col_info = st.columns([3, 1])
    with col_plot:
        fig = build_figure(state, sim.controller.pivot, config.surface_width, config.surface_height, config.surface_height * config.visual_length_ratio)
        event = st.plotly_chart(
            fig,
            use_container_width=True,
            config={"displayModeBar": False},
            on_select="rerun",
            selection_mode="points",
            key=PLOT_KEY,
        )
    _handle_pick(sim, event)

    with col_info:
        with st.container(border=True):
            for line in overlay_lines(state):
                st.markdown(f"`{line}`")
        hint = audio_hint(state)
        if hint:
            st.caption(hint)
    _play_pending_tones(sim)


def main() -> None:
    st.set_page_config(page_title="Pendel", layout="wide")
    sim = _ensure_session()

    st.title("Pendel")
    st.caption("Gedämpftes Pendel – greifen, ziehen, loslassen; Töne an den Umkehrpunkten")

    _update_controls(sim)

    frame = st.fragment(run_every=sim.config.frame_interval if st.session_state.get("running", False) else None)(_frame_view)
    frame(sim)

    with st.expander("Details (State)", expanded=False):
        st.write({
            "state": vars(sim.snapshot()),
            "params": vars(sim.config.params),
            "max_dt": sim.config.max_dt,
            "sim_time": sim.sim_time,
            "frames": sim.frame_count,
            "last_events": [e.value for e in sim.last_events],
        })


if __name__ == "__main__":
    main()
