"""Dynamic-programming solver that ranks every track at every reachable state."""

from __future__ import annotations

import logging
from itertools import product
from time import perf_counter
from typing import Optional

from .chance import ALL_LEVELS
from .data import MAX_CAPACITY, TRACK_LABELS
from .errors import InvariantViolation, ValidationError
from .models import Answer, GameState, State, available_tracks, transition
from .scoring import ScoringWeights

logger = logging.getLogger(__name__)


def _rank_key(answer: Answer) -> tuple[float, int]:
    """Best score first; equal scores go to the lower track index."""

    return -answer.score, answer.track


class PolicySolver:
    """Exact backward-induction solver for a fixed capacity and set of weights."""

    def __init__(self, weights: ScoringWeights, capacity: int) -> None:
        """Validate inputs; call :meth:`solve` to populate the policy table.

        Parameters
        ----------
        weights:
            Success and failure rewards per track.
        capacity:
            Number of slots on every track.
        """

        if not 1 <= capacity <= MAX_CAPACITY:
            raise ValidationError(f"capacity must lie in 1..{MAX_CAPACITY}, received {capacity}")
        self.weights = weights
        self.capacity = capacity
        self._ranked: dict[State, tuple[Answer, ...]] = {}
        self._solved = False
        self.solve_seconds = 0.0

    @property
    def num_states(self) -> int:
        """Return the number of non-terminal states stored in the policy."""

        return len(self._ranked)

    @property
    def is_solved(self) -> bool:
        return self._solved

    def solve(self) -> PolicySolver:
        """Fill the policy table by backward induction and return ``self``.

        ``product`` walks the remaining-capacity tuples in lexicographic order,
        so every successor (one component smaller) is stored before any state
        that leads to it.
        """

        if self._solved:
            return self

        start = perf_counter()
        success_weights = self.weights.success
        fail_weights = self.weights.fail
        ranked = self._ranked
        value = self.value
        for remaining in product(range(self.capacity + 1), repeat=3):
            if not any(remaining):
                continue
            for level in ALL_LEVELS:
                state = State(level, remaining)
                p_success = level.probability
                p_fail = 1.0 - p_success
                answers: list[Answer] = []
                for track in available_tracks(state):
                    success_state, fail_state = transition(state, track)
                    score = p_success * (success_weights[track] + value(success_state)) + p_fail * (
                        fail_weights[track] + value(fail_state)
                    )
                    answers.append(Answer(track, score))
                answers.sort(key=_rank_key)
                ranked[state] = tuple(answers)

        self._solved = True
        self.solve_seconds = perf_counter() - start
        logger.info(
            "Solved capacity %d: %d states in %.3fs",
            self.capacity,
            self.num_states,
            self.solve_seconds,
        )
        return self

    def ranked_answers(self, state: State) -> tuple[Answer, ...]:
        """Return every available track at ``state``, best first.

        Terminal states have no answers. Any other state missing from the table
        means the caller used a capacity this policy was not built for.
        """

        answers = self._ranked.get(state)
        if answers is not None:
            return answers
        if state.is_terminal:
            return ()
        raise InvariantViolation(
            f"State {state} is outside the policy built for capacity {self.capacity}"
        )

    def best_answer(self, state: State) -> Optional[Answer]:
        """Return the top-ranked answer, or None at a terminal state."""

        answers = self.ranked_answers(state)
        return answers[0] if answers else None

    def best_track(self, state: State) -> int:
        """Return the recommended track; ``state`` must not be terminal."""

        answers = self.ranked_answers(state)
        if not answers:
            raise InvariantViolation(f"No track to recommend at terminal state {state}")
        return answers[0].track

    def value(self, state: State) -> float:
        """Return the optimal expected future score from ``state``."""

        answers = self.ranked_answers(state)
        return answers[0].score if answers else 0.0

    def matches(self, game_state: GameState) -> bool:
        """Return True when ``game_state`` was built with this policy's capacity."""

        return game_state.num_slots == self.capacity

    def sorted_choices(self, game_state: GameState) -> Optional[tuple[Answer, ...]]:
        """Return ranked answers for the user's progress.

        Returns None while the policy belongs to a different slot count, which
        happens briefly while a rebuild for the new count is pending.
        """

        if not self.matches(game_state):
            return None
        return self.ranked_answers(game_state.to_state())

    def decision_output(self, game_state: GameState) -> str:
        """Return a human-readable recommendation for the current progress."""

        choices = self.sorted_choices(game_state)
        if choices is None:
            return "Waiting for solution"
        if not choices:
            score = self.weights.evaluate(game_state.success_counts(), self.capacity)
            return f"Finished (score {score:.3f})"
        best = choices[0]
        return f"Attempt {TRACK_LABELS[best.track]} (expected {best.score:+.3f})"


def build_policy(weights: ScoringWeights, capacity: int) -> PolicySolver:
    """Construct and solve a policy in one call."""

    return PolicySolver(weights, capacity).solve()
