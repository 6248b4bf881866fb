"""Streamlit front-end for the stone refinement optimizer."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from refinement_core import (
    ALL_LEVELS,
    DEFAULT_FAIL_WEIGHTS,
    DEFAULT_SIMULATION_RUNS,
    DEFAULT_SUCCESS_WEIGHTS,
    LOG_LEVEL_ENV_VAR,
    PRESET_CUSTOM_LABEL,
    SIMULATION_RUN_CHOICES,
    SLOT_CHOICES,
    TRACK_LABELS,
    WEIGHT_PRESETS,
    WEIGHT_ROW_LABELS,
    Answer,
    ChanceLevel,
    GameState,
    RecomputeService,
    SimulationSnapshot,
    WorkerUnavailable,
    format_weight,
    load_weight_presets,
    match_preset,
    parse_weights,
    preset_weights,
)

logging.basicConfig(
    level=os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Optional; presets found here are added to the built-in ones.
PRESET_PATH = Path(__file__).resolve().parent / "weight_presets.json"
ALL_PRESETS = {**WEIGHT_PRESETS, **load_weight_presets(PRESET_PATH)}
# Seconds to wait for the worker before rendering; slower results show after a refresh.
RESULT_WAIT_SECONDS = 5.0


def success_key(track: int) -> str:
    return f"weight_success_{track}"


def fail_key(track: int) -> str:
    return f"weight_fail_{track}"


def current_weight_fields() -> tuple[list[str], list[str]]:
    success = [st.session_state[success_key(track)] for track in range(len(TRACK_LABELS))]
    fail = [st.session_state[fail_key(track)] for track in range(len(TRACK_LABELS))]
    return success, fail


def ensure_session_state_defaults() -> None:
    """Populate Streamlit session state with expected default entries."""

    for track in range(len(TRACK_LABELS)):
        st.session_state.setdefault(success_key(track), format_weight(DEFAULT_SUCCESS_WEIGHTS[track]))
        st.session_state.setdefault(fail_key(track), format_weight(DEFAULT_FAIL_WEIGHTS[track]))
    st.session_state.setdefault("game_state", GameState())
    st.session_state.setdefault("simulation_runs", DEFAULT_SIMULATION_RUNS)
    st.session_state.setdefault("sent_weights", None)
    st.session_state.setdefault("sent_game_state", st.session_state.game_state)
    st.session_state.setdefault("sent_simulation_runs", st.session_state.simulation_runs)

    if "service" not in st.session_state:
        success, fail = current_weight_fields()
        weights = parse_weights(success, fail)
        st.session_state.sent_weights = weights
        st.session_state.service = RecomputeService(
            weights=weights,
            game_state=st.session_state.game_state,
            sample_count=st.session_state.simulation_runs,
        )
        logger.info("Started recompute service for a new session")


def apply_preset() -> None:
    """Copy the selected preset into the weight fields."""

    name = st.session_state.selected_preset
    if name == PRESET_CUSTOM_LABEL:
        return
    weights = preset_weights(name, ALL_PRESETS)
    for track in range(len(TRACK_LABELS)):
        st.session_state[success_key(track)] = format_weight(weights.success[track])
        st.session_state[fail_key(track)] = format_weight(weights.fail[track])


def record_attempt(track: int, success: bool) -> None:
    st.session_state.game_state = st.session_state.game_state.record(track, success)


def undo_attempt(track: int) -> None:
    st.session_state.game_state = st.session_state.game_state.undo(track)


def change_level() -> None:
    level = ChanceLevel.from_label(st.session_state.chance_widget)
    st.session_state.game_state = st.session_state.game_state.with_level(level)


def change_num_slots() -> None:
    st.session_state.game_state = st.session_state.game_state.with_num_slots(
        st.session_state.slots_widget
    )


def render_game_state(choices: Optional[Sequence[Answer]]) -> None:
    """Render the progress grid and highlight the recommended track."""

    game_state: GameState = st.session_state.game_state
    level_labels = [level.label for level in reversed(ALL_LEVELS)]
    st.session_state.chance_widget = game_state.level.label
    st.session_state.slots_widget = game_state.num_slots

    chance_col, slots_col = st.columns(2)
    chance_col.selectbox(
        "Success Chance",
        options=level_labels,
        key="chance_widget",
        on_change=change_level,
    )
    slots_col.selectbox(
        "Total Slots",
        options=SLOT_CHOICES,
        key="slots_widget",
        on_change=change_num_slots,
    )

    scores = {answer.track: answer.score for answer in choices or ()}
    best_track = choices[0].track if choices else None
    for track, label in enumerate(TRACK_LABELS):
        row = game_state.row(track)
        label_col, cells_col, success_col, fail_col, undo_col = st.columns([1.2, 3.0, 0.6, 0.6, 0.5])
        if track == best_track:
            label_col.markdown(f"<span class='best-track'>{label}</span>", unsafe_allow_html=True)
        else:
            label_col.markdown(label)
        cells = ["+1" if outcome else "fail" for outcome in row]
        cells.extend("--" for _ in range(game_state.num_slots - len(row)))
        expected = f" (EV {scores[track]:+.3f})" if track in scores else ""
        cells_col.markdown(" ".join(f"`{cell}`" for cell in cells) + expected)
        row_full = len(row) >= game_state.num_slots
        success_col.button(
            "+1",
            key=f"success_{track}",
            disabled=row_full,
            on_click=record_attempt,
            args=(track, True),
        )
        fail_col.button(
            "fail",
            key=f"fail_{track}",
            disabled=row_full,
            on_click=record_attempt,
            args=(track, False),
        )
        undo_col.button(
            "X",
            key=f"undo_{track}",
            disabled=not row,
            on_click=undo_attempt,
            args=(track,),
        )


def render_weight_inputs() -> None:
    """Render preset selection and the six weight fields."""

    success, fail = current_weight_fields()
    parsed = parse_weights(success, fail)
    preset_options = [*ALL_PRESETS.keys(), PRESET_CUSTOM_LABEL]
    st.session_state.selected_preset = (
        match_preset(parsed, ALL_PRESETS) if parsed is not None else PRESET_CUSTOM_LABEL
    )

    header_cols = st.columns(3)
    header_cols[1].markdown("**Success**")
    header_cols[2].markdown("**Fail**")
    for track, label in enumerate(WEIGHT_ROW_LABELS):
        label_col, success_col, fail_col = st.columns(3)
        label_col.markdown(label)
        success_col.text_input("Success", key=success_key(track), label_visibility="collapsed")
        fail_col.text_input("Fail", key=fail_key(track), label_visibility="collapsed")

    st.selectbox(
        "Presets",
        options=preset_options,
        key="selected_preset",
        on_change=apply_preset,
    )


def render_simulation(simulation: Optional[SimulationSnapshot]) -> None:
    """Render the most likely final outcomes table and chart."""

    st.selectbox(
        "Simulation runs",
        options=SIMULATION_RUN_CHOICES,
        key="simulation_runs",
    )
    if simulation is None:
        st.caption("Simulation results will appear once the solution is ready.")
        return

    frame = pd.DataFrame(
        [
            {
                TRACK_LABELS[0]: f"+{result.counts[0]}",
                TRACK_LABELS[1]: f"+{result.counts[1]}",
                TRACK_LABELS[2]: f"+{result.counts[2]}",
                "Probability": result.probability,
                "Final Score": result.score,
            }
            for result in simulation.results
        ]
    )
    st.dataframe(
        frame.style.format({"Probability": "{:.2%}", "Final Score": "{:.3f}"}),
        hide_index=True,
        use_container_width=True,
    )
    st.caption(
        f"{simulation.trials:,} runs, {simulation.distinct_outcomes} distinct outcomes, "
        f"mean final score {simulation.mean_score:.3f}, "
        f"computed in {simulation.compute_seconds:.2f}s"
    )

    chart_data = frame.assign(outcome=frame[TRACK_LABELS].agg(" / ".join, axis=1))
    chart = alt.Chart(chart_data).mark_bar(color="#3b82f6").encode(
        x=alt.X("outcome:N", sort=None, title="Outcome"),
        y=alt.Y("Probability:Q", axis=alt.Axis(format=".0%")),
        tooltip=[
            alt.Tooltip("outcome:N", title="Outcome"),
            alt.Tooltip("Probability:Q", format=".2%"),
            alt.Tooltip("Final Score:Q", format=".3f"),
        ],
    ).properties(height=220)
    st.altair_chart(chart, use_container_width=True)


def push_updates(service: RecomputeService) -> bool:
    """Forward changed inputs to the worker and return True if anything was sent."""

    sent = False
    success, fail = current_weight_fields()
    weights = parse_weights(success, fail)
    if weights is None:
        st.error("Weights must be finite numbers; the last valid weights are still in use.")
    elif weights != st.session_state.sent_weights:
        service.update_weights(weights)
        st.session_state.sent_weights = weights
        sent = True

    if st.session_state.game_state != st.session_state.sent_game_state:
        service.update_game_state(st.session_state.game_state)
        st.session_state.sent_game_state = st.session_state.game_state
        sent = True

    if st.session_state.simulation_runs != st.session_state.sent_simulation_runs:
        service.update_sample_count(st.session_state.simulation_runs)
        st.session_state.sent_simulation_runs = st.session_state.simulation_runs
        sent = True
    return sent


def apply_page_styling() -> None:
    """Inject CSS tweaks that style the Streamlit app."""

    st.set_page_config(page_title="Stone Refinement Optimizer", layout="wide")
    st.markdown(
        """
        <style>
        .best-track {
            background-color: #bbf7d0;
            border-radius: 6px;
            padding: 0.15rem 0.45rem;
            font-weight: 600;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )


def main() -> None:
    """Entry point used by Streamlit."""

    apply_page_styling()
    ensure_session_state_defaults()
    service: RecomputeService = st.session_state.service

    st.title("Ability Stone Refinement Optimizer")
    state_box = st.container(border=True)
    weights_col, sim_col = st.columns([1.0, 1.4])
    with weights_col:
        with st.container(border=True):
            st.subheader("Weights")
            render_weight_inputs()

    # Simulation run choice is read from session state, so the widget can render after the wait.
    try:
        if push_updates(service):
            with st.spinner("Updating solution…"):
                service.wait_idle(RESULT_WAIT_SECONDS)
    except WorkerUnavailable:
        st.error("Computation unavailable; reload the page to start a new session.")
        return

    with state_box:
        st.subheader("Current State")
        render_game_state(service.sorted_choices(st.session_state.game_state))
        st.markdown(f"**{service.recommendation(st.session_state.game_state)}**")

    with sim_col:
        with st.container(border=True):
            st.subheader("Most Likely Outcomes")
            render_simulation(service.sim_results())

    footer_col, refresh_col = st.columns([4.0, 1.0])
    footer_col.caption(service.status())
    refresh_col.button("Refresh")


if __name__ == "__main__":
    main()
