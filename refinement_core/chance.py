"""The six-step success-chance ladder."""

from __future__ import annotations

from enum import IntEnum


class ChanceLevel(IntEnum):
    """Success chance of the next attempt, ordered from lowest to highest."""

    P25 = 0
    P35 = 1
    P45 = 2
    P55 = 3
    P65 = 4
    P75 = 5

    def up(self) -> ChanceLevel:
        """Return the next higher level, staying put at the top."""

        return _UP[self]

    def down(self) -> ChanceLevel:
        """Return the next lower level, staying put at the bottom."""

        return _DOWN[self]

    @property
    def probability(self) -> float:
        return _PROBABILITIES[self]

    @property
    def label(self) -> str:
        return f"{round(100 * _PROBABILITIES[self])}%"

    @classmethod
    def from_label(cls, label: str) -> ChanceLevel:
        """Return the level whose label matches ``label`` (e.g. ``"45%"``)."""

        for level in cls:
            if level.label == label.strip():
                return level
        raise ValueError(f"Unknown chance label '{label}'")


_PROBABILITIES: dict[ChanceLevel, float] = {
    ChanceLevel.P25: 0.25,
    ChanceLevel.P35: 0.35,
    ChanceLevel.P45: 0.45,
    ChanceLevel.P55: 0.55,
    ChanceLevel.P65: 0.65,
    ChanceLevel.P75: 0.75,
}

# Transition tables are built once so the solver's inner loop never constructs enums.
_ORDERED: tuple[ChanceLevel, ...] = tuple(ChanceLevel)
_UP: dict[ChanceLevel, ChanceLevel] = {
    level: _ORDERED[min(index + 1, len(_ORDERED) - 1)] for index, level in enumerate(_ORDERED)
}
_DOWN: dict[ChanceLevel, ChanceLevel] = {
    level: _ORDERED[max(index - 1, 0)] for index, level in enumerate(_ORDERED)
}

ALL_LEVELS: tuple[ChanceLevel, ...] = _ORDERED
MIN_LEVEL: ChanceLevel = ChanceLevel.P25
MAX_LEVEL: ChanceLevel = ChanceLevel.P75
