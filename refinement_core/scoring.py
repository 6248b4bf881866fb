"""Reward weights, outcome scoring, and weight-entry parsing."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

from .data import PRESET_CUSTOM_LABEL, TOTAL_TRACKS, WEIGHT_PRESETS
from .errors import ValidationError


@dataclass(frozen=True)
class ScoringWeights:
    """Points awarded per track for each successful and each failed attempt."""

    success: tuple[float, float, float]
    fail: tuple[float, float, float]

    def __post_init__(self) -> None:
        for name in ("success", "fail"):
            try:
                values = tuple(float(value) for value in getattr(self, name))
            except (TypeError, ValueError) as exc:
                raise ValidationError(
                    f"{name} weights must be numbers, received {getattr(self, name)!r}"
                ) from exc
            if len(values) != TOTAL_TRACKS:
                raise ValidationError(
                    f"{name} weights must contain {TOTAL_TRACKS} entries, received {len(values)}"
                )
            if not all(math.isfinite(value) for value in values):
                raise ValidationError(f"{name} weights must be finite, received {values}")
            object.__setattr__(self, name, values)

    def evaluate(self, counts: Sequence[int], capacity: int) -> float:
        """Return the final score for per-track success ``counts`` out of ``capacity`` slots.

        Every slot not counted as a success is scored as a failure.
        """

        return sum(
            self.success[track] * counts[track] + self.fail[track] * (capacity - counts[track])
            for track in range(TOTAL_TRACKS)
        )


def parse_weight_text(text: str) -> Optional[float]:
    """Return the finite float typed into a weight field, or None if it is not one."""

    try:
        value = float(text.strip())
    except (AttributeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def weights_from_fields(
    success_fields: Sequence[str],
    fail_fields: Sequence[str],
) -> Optional[ScoringWeights]:
    """Build weights from six text fields, or return None when any field is invalid.

    Invalid input is dropped here so it never reaches the recompute worker.
    """

    success = [parse_weight_text(text) for text in success_fields]
    fail = [parse_weight_text(text) for text in fail_fields]
    if len(success) != TOTAL_TRACKS or len(fail) != TOTAL_TRACKS:
        return None
    if any(value is None for value in success) or any(value is None for value in fail):
        return None
    return ScoringWeights(success=tuple(success), fail=tuple(fail))


def preset_weights(
    name: str,
    presets: Optional[Mapping[str, tuple[Sequence[float], Sequence[float]]]] = None,
) -> ScoringWeights:
    """Return the weights stored under preset ``name``."""

    table = WEIGHT_PRESETS if presets is None else presets
    try:
        success, fail = table[name]
    except KeyError as exc:
        raise ValidationError(f"Unknown preset '{name}'") from exc
    return ScoringWeights(success=tuple(success), fail=tuple(fail))


def match_preset(
    weights: ScoringWeights,
    presets: Optional[Mapping[str, tuple[Sequence[float], Sequence[float]]]] = None,
) -> str:
    """Return the name of the preset equal to ``weights``, or the custom label."""

    table = WEIGHT_PRESETS if presets is None else presets
    for name, (success, fail) in table.items():
        if tuple(success) == weights.success and tuple(fail) == weights.fail:
            return name
    return PRESET_CUSTOM_LABEL


def format_weight(value: float) -> str:
    """Return the text written back into a weight field when a preset is applied."""

    return f"{value:.1f}"
