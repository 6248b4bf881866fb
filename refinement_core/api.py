"""High-level entry points used by the UI and callers."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from time import perf_counter
from typing import Optional

from .models import Answer, GameState, SimulationSnapshot
from .scoring import ScoringWeights, weights_from_fields
from .simulation import simulate_top_n
from .solver import PolicySolver


def parse_weights(
    success_fields: Sequence[str],
    fail_fields: Sequence[str],
) -> Optional[ScoringWeights]:
    """Return weights parsed from the six text fields, or None when any is invalid.

    Parameters
    ----------
    success_fields:
        Text typed for the success weight of each track.
    fail_fields:
        Text typed for the failure weight of each track.
    """

    return weights_from_fields(success_fields, fail_fields)


def make_weights(success: Sequence[float], fail: Sequence[float]) -> ScoringWeights:
    """Factory helper that keeps the UI decoupled from the dataclass."""

    return ScoringWeights(success=tuple(success), fail=tuple(fail))


@dataclass
class PolicyComputationResult:
    """Bundle containing the solver and derived reporting artefacts."""

    solver: PolicySolver
    game_state: GameState
    choices: tuple[Answer, ...]
    compute_seconds: float
    simulation: Optional[SimulationSnapshot]


def compute_optimal_policy(
    weights: ScoringWeights,
    game_state: Optional[GameState] = None,
    simulation_runs: int = 0,
    simulation_seed: Optional[int] = 42,
) -> PolicyComputationResult:
    """Solve the policy for ``game_state`` and optionally simulate its outcomes.

    This is the synchronous counterpart of :class:`RecomputeService` for
    scripts and one-off queries.

    Parameters
    ----------
    weights:
        Success and failure rewards per track.
    game_state:
        Progress to advise on; defaults to a fresh game.
    simulation_runs:
        Number of Monte Carlo runs to execute (0 disables simulation).
    simulation_seed:
        Seed forwarded to the RNG used for simulations.

    Returns
    -------
    PolicyComputationResult
        Bundle containing the solved policy, ranked choices, and optional simulation.
    """

    if game_state is None:
        game_state = GameState()

    solver = PolicySolver(weights, game_state.num_slots)
    compute_start = perf_counter()
    solver.solve()
    compute_seconds = perf_counter() - compute_start

    simulation: Optional[SimulationSnapshot] = None
    if simulation_runs > 0:
        simulation = simulate_top_n(
            solver,
            game_state,
            simulation_runs,
            seed=simulation_seed,
        )

    return PolicyComputationResult(
        solver=solver,
        game_state=game_state,
        choices=solver.ranked_answers(game_state.to_state()),
        compute_seconds=compute_seconds,
        simulation=simulation,
    )
