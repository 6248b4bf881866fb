"""Policy solver, outcome simulator, and recompute service for stone refinement."""

from .api import (
    PolicyComputationResult,
    compute_optimal_policy,
    make_weights,
    parse_weights,
)
from .chance import ALL_LEVELS, ChanceLevel
from .data import (
    DEFAULT_FAIL_WEIGHTS,
    DEFAULT_NUM_SLOTS,
    DEFAULT_SIMULATION_RUNS,
    DEFAULT_SUCCESS_WEIGHTS,
    LOG_LEVEL_ENV_VAR,
    PRESET_CUSTOM_LABEL,
    SIMULATION_RUN_CHOICES,
    SLOT_CHOICES,
    TRACK_LABELS,
    WEIGHT_PRESETS,
    WEIGHT_ROW_LABELS,
    load_weight_presets,
)
from .errors import (
    InvalidChoice,
    InvariantViolation,
    RefinementError,
    ValidationError,
    WorkerUnavailable,
)
from .models import (
    Answer,
    GameState,
    SimulationResult,
    SimulationSnapshot,
    State,
    available_tracks,
    transition,
)
from .scoring import ScoringWeights, format_weight, match_preset, preset_weights
from .service import RecomputeService, ServiceConfig, ServicePhase, Snapshot
from .simulation import first_available, simulate_once, simulate_top_n
from .solver import PolicySolver, build_policy

__all__ = [
    "ALL_LEVELS",
    "Answer",
    "ChanceLevel",
    "DEFAULT_FAIL_WEIGHTS",
    "DEFAULT_NUM_SLOTS",
    "DEFAULT_SIMULATION_RUNS",
    "DEFAULT_SUCCESS_WEIGHTS",
    "GameState",
    "InvalidChoice",
    "InvariantViolation",
    "LOG_LEVEL_ENV_VAR",
    "PRESET_CUSTOM_LABEL",
    "PolicyComputationResult",
    "PolicySolver",
    "RecomputeService",
    "RefinementError",
    "SIMULATION_RUN_CHOICES",
    "SLOT_CHOICES",
    "ScoringWeights",
    "ServiceConfig",
    "ServicePhase",
    "SimulationResult",
    "SimulationSnapshot",
    "Snapshot",
    "State",
    "TRACK_LABELS",
    "ValidationError",
    "WEIGHT_PRESETS",
    "WEIGHT_ROW_LABELS",
    "WorkerUnavailable",
    "available_tracks",
    "build_policy",
    "compute_optimal_policy",
    "first_available",
    "format_weight",
    "load_weight_presets",
    "make_weights",
    "match_preset",
    "parse_weights",
    "preset_weights",
    "simulate_once",
    "simulate_top_n",
    "transition",
]
