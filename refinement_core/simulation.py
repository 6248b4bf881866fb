"""Monte Carlo rollouts of a solved policy and baseline decision rules."""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Callable
from time import perf_counter
from typing import Optional

from .data import DEFAULT_TOP_N
from .errors import ValidationError
from .models import (
    Counts,
    GameState,
    SimulationResult,
    SimulationSnapshot,
    State,
    available_tracks,
    transition,
)
from .solver import PolicySolver

logger = logging.getLogger(__name__)

DecisionFn = Callable[[State], int]


def simulate_once(
    solver: PolicySolver,
    game_state: GameState,
    rng: random.Random,
    decision: Optional[DecisionFn] = None,
) -> Counts:
    """Play one game to the end from ``game_state`` and return per-track successes.

    Parameters
    ----------
    solver:
        Solved policy whose capacity matches ``game_state.num_slots``.
    game_state:
        Progress so far; recorded successes count towards the result.
    rng:
        Random number generator; seed it for reproducible runs.
    decision:
        Optional override for the policy's top-ranked track. Choosing a track
        with no slots left raises :class:`InvalidChoice`.
    """

    choose = decision or solver.best_track
    counts = list(game_state.success_counts())
    state = game_state.to_state()
    while not state.is_terminal:
        track = choose(state)
        success_state, fail_state = transition(state, track)
        if rng.random() < state.level.probability:
            counts[track] += 1
            state = success_state
        else:
            state = fail_state
    return counts[0], counts[1], counts[2]


def simulate_top_n(
    solver: PolicySolver,
    game_state: GameState,
    trials: int,
    top_n: int = DEFAULT_TOP_N,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    decision: Optional[DecisionFn] = None,
) -> SimulationSnapshot:
    """Run ``trials`` rollouts and return the ``top_n`` most frequent final outcomes.

    Outcomes with equal frequency are ordered by their counts tuple so the
    ranking is stable for a fixed seed.
    """

    if trials <= 0:
        raise ValidationError(f"trials must be positive, received {trials}")
    if not solver.matches(game_state):
        raise ValidationError(
            f"Policy capacity {solver.capacity} does not match {game_state.num_slots} slots"
        )

    generator = rng or random.Random(seed)
    start = perf_counter()
    outcomes: Counter[Counts] = Counter()
    for _ in range(trials):
        outcomes[simulate_once(solver, game_state, generator, decision=decision)] += 1

    capacity = solver.capacity
    evaluate = solver.weights.evaluate
    total_score = sum(evaluate(counts, capacity) * seen for counts, seen in outcomes.items())
    ranked = sorted(outcomes.items(), key=lambda item: (-item[1], item[0]))[:top_n]
    results = tuple(
        SimulationResult(
            counts=counts,
            probability=seen / trials,
            score=evaluate(counts, capacity),
        )
        for counts, seen in ranked
    )
    compute_seconds = perf_counter() - start
    logger.debug(
        "Simulated %d trials (%d distinct outcomes) in %.3fs",
        trials,
        len(outcomes),
        compute_seconds,
    )
    return SimulationSnapshot(
        results=results,
        trials=trials,
        distinct_outcomes=len(outcomes),
        mean_score=total_score / trials,
        compute_seconds=compute_seconds,
    )


def first_available(state: State) -> int:
    """Baseline rule that always attempts the lowest-indexed open track."""

    return available_tracks(state)[0]
