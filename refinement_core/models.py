"""Value types shared across the solver, simulation, and recompute service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from .chance import ChanceLevel
from .data import DEFAULT_CHANCE, DEFAULT_NUM_SLOTS, MAX_CAPACITY, TOTAL_TRACKS
from .errors import InvalidChoice, ValidationError

Remaining = tuple[int, int, int]
Counts = tuple[int, int, int]


class State(NamedTuple):
    """Decision point: current chance level and attempts left on each track."""

    level: ChanceLevel
    remaining: Remaining

    @property
    def is_terminal(self) -> bool:
        return not any(self.remaining)


class Answer(NamedTuple):
    """A candidate track together with its expected future score."""

    track: int
    score: float


def available_tracks(state: State) -> tuple[int, ...]:
    """Return the tracks that still have capacity (empty iff ``state`` is terminal)."""

    return tuple(track for track in range(TOTAL_TRACKS) if state.remaining[track] > 0)


def transition(state: State, track: int) -> tuple[State, State]:
    """Return the (success, failure) successors of attempting ``track``.

    Both successors spend one unit of the track's capacity; success lowers the
    chance ladder and failure raises it.
    """

    if not 0 <= track < TOTAL_TRACKS or state.remaining[track] <= 0:
        raise InvalidChoice(f"No capacity left on track {track} in {state}")
    remaining = list(state.remaining)
    remaining[track] -= 1
    spent = (remaining[0], remaining[1], remaining[2])
    return State(state.level.down(), spent), State(state.level.up(), spent)


@dataclass(frozen=True)
class GameState:
    """Progress entered by the user: chance level, slot count, and recorded outcomes.

    ``rows[track]`` lists the outcomes recorded on that track so far, ``True``
    for a success.
    """

    level: ChanceLevel = DEFAULT_CHANCE
    num_slots: int = DEFAULT_NUM_SLOTS
    rows: tuple[tuple[bool, ...], ...] = field(default_factory=lambda: ((), (), ()))

    def __post_init__(self) -> None:
        if not 1 <= self.num_slots <= MAX_CAPACITY:
            raise ValidationError(
                f"num_slots must lie in 1..{MAX_CAPACITY}, received {self.num_slots}"
            )
        rows = tuple(tuple(bool(outcome) for outcome in row) for row in self.rows)
        if len(rows) != TOTAL_TRACKS:
            raise ValidationError(f"Expected {TOTAL_TRACKS} rows, received {len(rows)}")
        for track, row in enumerate(rows):
            if len(row) > self.num_slots:
                raise ValidationError(
                    f"Track {track} records {len(row)} attempts but only has {self.num_slots} slots"
                )
        try:
            level = ChanceLevel(self.level)
        except ValueError as exc:
            raise ValidationError(f"Unknown chance level {self.level!r}") from exc
        object.__setattr__(self, "level", level)
        object.__setattr__(self, "rows", rows)

    def row(self, track: int) -> tuple[bool, ...]:
        return self.rows[track]

    def remaining(self) -> Remaining:
        left = [self.num_slots - len(row) for row in self.rows]
        return left[0], left[1], left[2]

    def success_counts(self) -> Counts:
        counts = [sum(row) for row in self.rows]
        return counts[0], counts[1], counts[2]

    def to_state(self) -> State:
        return State(self.level, self.remaining())

    @property
    def is_complete(self) -> bool:
        return all(len(row) == self.num_slots for row in self.rows)

    def record(self, track: int, success: bool) -> GameState:
        """Return the game state after recording one attempt on ``track``."""

        if len(self.rows[track]) >= self.num_slots:
            raise ValidationError(f"Track {track} has no free slots left")
        rows = list(self.rows)
        rows[track] = rows[track] + (bool(success),)
        level = self.level.down() if success else self.level.up()
        return GameState(level=level, num_slots=self.num_slots, rows=tuple(rows))

    def undo(self, track: int) -> GameState:
        """Return the game state with the last attempt on ``track`` removed.

        The ladder step taken by that attempt is reverted.
        """

        if not self.rows[track]:
            return self
        rows = list(self.rows)
        last = rows[track][-1]
        rows[track] = rows[track][:-1]
        level = self.level.up() if last else self.level.down()
        return GameState(level=level, num_slots=self.num_slots, rows=tuple(rows))

    def with_num_slots(self, num_slots: int) -> GameState:
        """Return a copy with a new slot count, truncating rows that no longer fit."""

        rows = tuple(row[:num_slots] for row in self.rows)
        return GameState(level=self.level, num_slots=num_slots, rows=rows)

    def with_level(self, level: ChanceLevel) -> GameState:
        return GameState(level=level, num_slots=self.num_slots, rows=self.rows)


@dataclass(frozen=True)
class SimulationResult:
    """One final outcome observed during simulation."""

    counts: Counts
    probability: float
    score: float


@dataclass(frozen=True)
class SimulationSnapshot:
    """Most likely final outcomes of a batch of rollouts."""

    results: tuple[SimulationResult, ...]
    trials: int
    distinct_outcomes: int
    mean_score: float
    compute_seconds: float = 0.0
