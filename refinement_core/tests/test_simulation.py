import random
import unittest

from refinement_core.errors import InvalidChoice, ValidationError
from refinement_core.models import GameState
from refinement_core.scoring import ScoringWeights
from refinement_core.simulation import first_available, simulate_once, simulate_top_n
from refinement_core.solver import build_policy

DEFAULT_WEIGHTS = ScoringWeights(success=(1.0, 1.5, -1.0), fail=(-1.0, -1.0, 0.0))


class FixedRandom(random.Random):
    """Random source that always draws the same value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class CyclingRandom(random.Random):
    """Random source that repeats a fixed sequence of draws."""

    def __init__(self, values):
        super().__init__(0)
        self.values = values
        self.index = 0

    def random(self):
        value = self.values[self.index % len(self.values)]
        self.index += 1
        return value


class TestSimulateOnce(unittest.TestCase):
    def setUp(self):
        self.solver = build_policy(DEFAULT_WEIGHTS, 4)

    def test_every_attempt_succeeds_when_draws_are_zero(self):
        counts = simulate_once(self.solver, GameState(num_slots=4), FixedRandom(0.0))
        self.assertEqual(counts, (4, 4, 4))

    def test_every_attempt_fails_when_draws_are_high(self):
        counts = simulate_once(self.solver, GameState(num_slots=4), FixedRandom(0.99))
        self.assertEqual(counts, (0, 0, 0))

    def test_recorded_successes_are_kept(self):
        game_state = GameState(num_slots=4).record(0, True).record(0, True).record(1, False)
        counts = simulate_once(self.solver, game_state, FixedRandom(0.99))
        self.assertEqual(counts, (2, 0, 0))

    def test_decision_override(self):
        seen = []

        def decision(state):
            seen.append(state)
            return first_available(state)

        simulate_once(self.solver, GameState(num_slots=4), random.Random(1), decision=decision)
        self.assertEqual(len(seen), 12)
        self.assertEqual(seen[0].remaining, (4, 4, 4))
        self.assertEqual(seen[-1].remaining, (0, 0, 1))

    def test_decision_on_a_full_track_raises(self):
        solver = build_policy(DEFAULT_WEIGHTS, 2)
        with self.assertRaises(InvalidChoice):
            simulate_once(solver, GameState(num_slots=2), random.Random(1), decision=lambda state: 0)


class TestSimulateTopN(unittest.TestCase):
    def setUp(self):
        self.solver = build_policy(DEFAULT_WEIGHTS, 4)

    def test_ranked_results_are_well_formed(self):
        snapshot = simulate_top_n(self.solver, GameState(num_slots=4), 2000, seed=7)
        self.assertEqual(snapshot.trials, 2000)
        self.assertLessEqual(len(snapshot.results), 10)
        self.assertGreaterEqual(snapshot.distinct_outcomes, len(snapshot.results))
        probabilities = [result.probability for result in snapshot.results]
        self.assertEqual(probabilities, sorted(probabilities, reverse=True))
        self.assertLessEqual(sum(probabilities), 1.0 + 1e-9)
        for result in snapshot.results:
            self.assertLessEqual(result.probability, 1.0)
            self.assertTrue(all(0 <= count <= 4 for count in result.counts))
            self.assertAlmostEqual(result.score, DEFAULT_WEIGHTS.evaluate(result.counts, 4))

    def test_top_n_limits_results(self):
        snapshot = simulate_top_n(self.solver, GameState(num_slots=4), 500, top_n=3, seed=3)
        self.assertEqual(len(snapshot.results), 3)

    def test_recorded_progress_bounds_outcomes(self):
        game_state = GameState(num_slots=4).record(0, True).record(0, True)
        snapshot = simulate_top_n(self.solver, game_state, 1000, seed=11)
        for result in snapshot.results:
            self.assertGreaterEqual(result.counts[0], 2)

    def test_seeded_runs_are_reproducible(self):
        first = simulate_top_n(self.solver, GameState(num_slots=4), 1000, seed=42)
        second = simulate_top_n(self.solver, GameState(num_slots=4), 1000, seed=42)
        self.assertEqual(first.results, second.results)
        self.assertEqual(first.mean_score, second.mean_score)

    def test_equally_frequent_outcomes_are_ordered_by_counts(self):
        solver = build_policy(DEFAULT_WEIGHTS, 1)
        # Three draws per trial, so trials alternate between (1, 0, 1) and (0, 1, 0).
        rng = CyclingRandom([0.0, 0.99])
        snapshot = simulate_top_n(solver, GameState(num_slots=1), 4, rng=rng, decision=first_available)
        self.assertEqual([result.counts for result in snapshot.results], [(0, 1, 0), (1, 0, 1)])
        self.assertEqual([result.probability for result in snapshot.results], [0.5, 0.5])

    def test_finished_game_has_a_single_outcome(self):
        game_state = GameState(
            num_slots=4,
            rows=((True, True, False, True), (False,) * 4, (True, False, False, False)),
        )
        snapshot = simulate_top_n(self.solver, game_state, 50, seed=1)
        self.assertEqual(len(snapshot.results), 1)
        self.assertEqual(snapshot.results[0].counts, (3, 0, 1))
        self.assertEqual(snapshot.results[0].probability, 1.0)
        self.assertAlmostEqual(snapshot.mean_score, DEFAULT_WEIGHTS.evaluate((3, 0, 1), 4))

    def test_invalid_arguments(self):
        with self.assertRaises(ValidationError):
            simulate_top_n(self.solver, GameState(num_slots=4), 0)
        with self.assertRaises(ValidationError):
            simulate_top_n(self.solver, GameState(num_slots=5), 10)


if __name__ == "__main__":
    unittest.main()
