"""Domain constants, preset tables, and preset file helpers."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from .chance import ChanceLevel

TRACK_LABELS: Final[list[str]] = ["Skill 1", "Skill 2", "Negative"]
WEIGHT_ROW_LABELS: Final[list[str]] = ["Buff 1", "Buff 2", "Debuff"]

TOTAL_TRACKS: Final[int] = len(TRACK_LABELS)

# Slot counts offered by the front-end; the solver accepts anything in 1..MAX_CAPACITY.
SLOT_CHOICES: Final[list[int]] = list(range(2, 17))
DEFAULT_NUM_SLOTS: Final[int] = 8
MAX_CAPACITY: Final[int] = 32

DEFAULT_CHANCE: Final[ChanceLevel] = ChanceLevel.P75

SIMULATION_RUN_CHOICES: Final[list[int]] = [100, 1_000, 10_000, 100_000]
DEFAULT_SIMULATION_RUNS: Final[int] = 10_000
DEFAULT_TOP_N: Final[int] = 10
DEFAULT_SIMULATION_SEED: Final[int | None] = None

DEFAULT_SUCCESS_WEIGHTS: Final[tuple[float, float, float]] = (1.0, 1.5, -1.0)
DEFAULT_FAIL_WEIGHTS: Final[tuple[float, float, float]] = (-1.0, -1.0, 0.0)

# name -> (success weights, fail weights)
WEIGHT_PRESETS: Final[dict[str, tuple[tuple[float, float, float], tuple[float, float, float]]]] = {
    "Balanced; slightly prefer skill 1": ((1.1, 1.0, -1.0), (0.0, 0.0, 0.0)),
    "Balanced; slightly prefer skill 2": ((1.0, 1.1, -1.0), (0.0, 0.0, 0.0)),
}

PRESET_CUSTOM_LABEL: Final[str] = "Custom"

LOG_LEVEL_ENV_VAR: Final[str] = "REFINEMENT_LOG_LEVEL"


def _parse_weight_row(value: object) -> tuple[float, float, float] | None:
    """Return a three-float tuple, or None when ``value`` is not one."""

    if not isinstance(value, (list, tuple)) or len(value) != TOTAL_TRACKS:
        return None
    try:
        a, b, c = (float(item) for item in value)
    except (TypeError, ValueError):
        return None
    return a, b, c


def load_weight_presets(
    preset_path: str | Path | None,
) -> dict[str, tuple[tuple[float, float, float], tuple[float, float, float]]]:
    """Load additional weight presets from a JSON file.

    The file maps a preset name to ``{"success": [..3..], "fail": [..3..]}``.
    Missing or malformed files and entries are skipped.
    """

    if not preset_path:
        return {}

    path = Path(preset_path)
    try:
        raw_data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError):
        return {}

    if not isinstance(raw_data, Mapping):
        return {}

    presets: dict[str, tuple[tuple[float, float, float], tuple[float, float, float]]] = {}
    for name, weights in raw_data.items():
        if not isinstance(name, str) or not isinstance(weights, Mapping):
            continue
        success = _parse_weight_row(weights.get("success"))
        fail = _parse_weight_row(weights.get("fail"))
        if success is None or fail is None:
            continue
        presets[name] = (success, fail)

    return presets
