"""Background worker that keeps the solved policy and simulation in sync with user edits."""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .data import DEFAULT_SIMULATION_SEED, DEFAULT_TOP_N
from .errors import ValidationError, WorkerUnavailable
from .models import Answer, GameState, SimulationSnapshot
from .rwlock import ReadWriteLock
from .scoring import ScoringWeights
from .simulation import simulate_top_n
from .solver import PolicySolver

logger = logging.getLogger(__name__)

_EMPTY: Any = object()


@dataclass(frozen=True)
class ServiceConfig:
    """Tunables for a recompute service."""

    top_n: int = DEFAULT_TOP_N
    seed: Optional[int] = DEFAULT_SIMULATION_SEED
    thread_name: str = "refinement-worker"


class ServicePhase(str, Enum):
    EMPTY = "empty"
    BUILDING = "building"
    SOLVED = "solved"
    READY = "ready"


@dataclass(frozen=True)
class Snapshot:
    """Everything a reader may see at once; replaced wholesale on every publish."""

    game_state: GameState
    solver: Optional[PolicySolver] = None
    simulation: Optional[SimulationSnapshot] = None
    building: bool = False

    @property
    def phase(self) -> ServicePhase:
        if self.solver is None:
            return ServicePhase.BUILDING if self.building else ServicePhase.EMPTY
        if self.simulation is None:
            return ServicePhase.SOLVED
        return ServicePhase.READY


class _Mailbox:
    """Single-slot mailbox where a newer value replaces an unread one."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._value: Any = _EMPTY

    @property
    def pending(self) -> bool:
        return self._value is not _EMPTY

    def put(self, value: Any) -> bool:
        """Store ``value`` and return True if it replaced an unread one."""

        replaced = self.pending
        self._value = value
        return replaced

    def take(self) -> Any:
        value, self._value = self._value, _EMPTY
        return value


PublishCallback = Callable[[Snapshot], None]


class RecomputeService:
    """Owns the authoritative policy and simulation results for one session.

    Updates arrive on three channels (weights, sample count, game state). Each
    channel keeps only its newest unread value, so a burst of edits collapses
    into one recomputation. Readers never wait on computation; they see the
    last published :class:`Snapshot`.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        weights: Optional[ScoringWeights] = None,
        game_state: Optional[GameState] = None,
        sample_count: Optional[int] = None,
        on_publish: Optional[PublishCallback] = None,
        start: bool = True,
    ) -> None:
        self.config = config or ServiceConfig()
        self.on_publish = on_publish

        self._cond = threading.Condition()
        self._weights_box = _Mailbox("weights")
        self._samples_box = _Mailbox("sample count")
        self._game_state_box = _Mailbox("game state")
        self._busy = False
        self._stopping = False
        self._crashed = False
        self._thread: Optional[threading.Thread] = None

        self._snapshot_lock = ReadWriteLock()
        initial_state = game_state or GameState()
        self._snapshot = Snapshot(game_state=initial_state)

        # Worker-owned; touched only by the worker thread once it is running.
        self._weights: Optional[ScoringWeights] = None
        self._sample_count: Optional[int] = None
        self._game_state = initial_state
        self._solver: Optional[PolicySolver] = None
        self._rng = random.Random(self.config.seed)
        self.rebuild_count = 0
        self.simulation_count = 0

        if weights is not None:
            self._weights_box.put(weights)
        if sample_count is not None:
            self._samples_box.put(self._check_sample_count(sample_count))
        if start:
            self.start()

    # ---- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Launch the worker thread; pending updates are processed immediately."""

        with self._cond:
            if self._thread is not None:
                return
            self._thread = threading.Thread(
                target=self._run, name=self.config.thread_name, daemon=True
            )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the worker to exit after its current computation and wait for it."""

        with self._cond:
            self._stopping = True
            self._cond.notify_all()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def __enter__(self) -> RecomputeService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._crashed

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every queued update has been processed.

        Returns False if ``timeout`` expires first. Also returns once the
        worker has stopped or crashed, since nothing further will be processed.
        """

        with self._cond:
            return self._cond.wait_for(
                lambda: self._crashed
                or self._stopping
                or (not self._busy and not self._has_pending()),
                timeout,
            )

    # ---- update channels -----------------------------------------------------

    def update_weights(self, weights: ScoringWeights) -> None:
        if not isinstance(weights, ScoringWeights):
            raise ValidationError(f"Expected ScoringWeights, received {type(weights).__name__}")
        self._send(self._weights_box, weights)

    def update_sample_count(self, sample_count: int) -> None:
        self._send(self._samples_box, self._check_sample_count(sample_count))

    def update_game_state(self, game_state: GameState) -> None:
        if not isinstance(game_state, GameState):
            raise ValidationError(f"Expected GameState, received {type(game_state).__name__}")
        self._send(self._game_state_box, game_state)

    @staticmethod
    def _check_sample_count(sample_count: int) -> int:
        if isinstance(sample_count, bool) or not isinstance(sample_count, int) or sample_count <= 0:
            raise ValidationError(
                f"Sample count must be a positive integer, received {sample_count!r}"
            )
        return sample_count

    def _send(self, mailbox: _Mailbox, value: Any) -> None:
        with self._cond:
            if self._crashed or self._stopping:
                raise WorkerUnavailable("computation unavailable: recompute worker is not running")
            if mailbox.put(value):
                logger.debug("Superseded an unread %s update", mailbox.name)
            self._cond.notify_all()

    def _has_pending(self) -> bool:
        return (
            self._weights_box.pending
            or self._samples_box.pending
            or self._game_state_box.pending
        )

    # ---- readers -------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        with self._snapshot_lock.read():
            return self._snapshot

    def has_policy(self) -> bool:
        return self.snapshot().solver is not None

    def status(self) -> str:
        snapshot = self.snapshot()
        if snapshot.solver is None:
            return "finding solution…"
        if snapshot.simulation is None:
            return f"solved ({snapshot.solver.num_states} states); running simulations…"
        return f"solved ({snapshot.solver.num_states} states)"

    def sorted_choices(self, game_state: GameState) -> Optional[tuple[Answer, ...]]:
        """Return ranked tracks for ``game_state``, or None until a matching policy exists."""

        solver = self.snapshot().solver
        if solver is None:
            return None
        return solver.sorted_choices(game_state)

    def recommendation(self, game_state: GameState) -> str:
        solver = self.snapshot().solver
        if solver is None:
            return "Waiting for solution"
        return solver.decision_output(game_state)

    def sim_results(self) -> Optional[SimulationSnapshot]:
        return self.snapshot().simulation

    # ---- worker --------------------------------------------------------------

    def _run(self) -> None:
        logger.debug("Recompute worker started")
        try:
            while True:
                with self._cond:
                    while not self._stopping and not self._has_pending():
                        self._cond.wait()
                    if self._stopping:
                        break
                    weights = self._weights_box.take()
                    sample_count = self._samples_box.take()
                    game_state = self._game_state_box.take()
                    self._busy = True
                try:
                    self._apply(weights, sample_count, game_state)
                finally:
                    with self._cond:
                        self._busy = False
                        self._cond.notify_all()
        except Exception:
            logger.exception("Recompute worker crashed; published results will no longer update")
            with self._cond:
                self._crashed = True
                self._cond.notify_all()
            return
        logger.debug("Recompute worker stopped")

    def _apply(self, weights: Any, sample_count: Any, game_state: Any) -> None:
        rebuild = False
        rerun = False
        if weights is not _EMPTY and weights != self._weights:
            self._weights = weights
            rebuild = True
        if sample_count is not _EMPTY and sample_count != self._sample_count:
            self._sample_count = sample_count
            rerun = True
        if game_state is not _EMPTY and game_state != self._game_state:
            if game_state.num_slots != self._game_state.num_slots:
                rebuild = True
            else:
                rerun = True
            self._game_state = game_state

        if rebuild:
            self._rebuild_solution()
        elif rerun:
            self._rerun_simulation()

    def _rebuild_solution(self) -> None:
        if self._weights is None:
            self._publish(None)
            return
        self._solver = None
        self._publish(None, building=True)
        self._solver = PolicySolver(self._weights, self._game_state.num_slots).solve()
        self.rebuild_count += 1
        self._rerun_simulation()

    def _rerun_simulation(self) -> None:
        self._publish(None)
        if self._solver is None or self._sample_count is None:
            return
        simulation = simulate_top_n(
            self._solver,
            self._game_state,
            self._sample_count,
            top_n=self.config.top_n,
            rng=self._rng,
        )
        self.simulation_count += 1
        self._publish(simulation)

    def _publish(self, simulation: Optional[SimulationSnapshot], building: bool = False) -> None:
        snapshot = Snapshot(
            game_state=self._game_state,
            solver=self._solver,
            simulation=simulation,
            building=building,
        )
        with self._snapshot_lock.write():
            self._snapshot = snapshot
        if self.on_publish is not None:
            self.on_publish(snapshot)
