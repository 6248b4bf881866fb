import unittest

from refinement_core.chance import ChanceLevel
from refinement_core.errors import InvalidChoice, InvariantViolation, ValidationError
from refinement_core.models import GameState, State, available_tracks, transition


class TestTransitionModel(unittest.TestCase):
    def test_available_tracks(self):
        self.assertEqual(available_tracks(State(ChanceLevel.P55, (1, 0, 2))), (0, 2))
        self.assertEqual(available_tracks(State(ChanceLevel.P55, (0, 0, 0))), ())

    def test_terminal_only_when_everything_is_spent(self):
        self.assertTrue(State(ChanceLevel.P25, (0, 0, 0)).is_terminal)
        self.assertFalse(State(ChanceLevel.P25, (0, 0, 1)).is_terminal)

    def test_transition_spends_capacity_and_moves_the_ladder(self):
        success, fail = transition(State(ChanceLevel.P55, (2, 1, 3)), 2)
        self.assertEqual(success, State(ChanceLevel.P45, (2, 1, 2)))
        self.assertEqual(fail, State(ChanceLevel.P65, (2, 1, 2)))

    def test_transition_without_capacity_is_rejected(self):
        with self.assertRaises(InvalidChoice):
            transition(State(ChanceLevel.P55, (0, 1, 1)), 0)
        self.assertTrue(issubclass(InvalidChoice, InvariantViolation))


class TestGameState(unittest.TestCase):
    def test_defaults(self):
        game_state = GameState()
        self.assertEqual(game_state.level, ChanceLevel.P75)
        self.assertEqual(game_state.num_slots, 8)
        self.assertEqual(game_state.to_state(), State(ChanceLevel.P75, (8, 8, 8)))

    def test_record_and_undo_restore_the_ladder(self):
        game_state = GameState(num_slots=4)
        played = game_state.record(0, True).record(2, False)
        self.assertEqual(played.level, ChanceLevel.P75)
        self.assertEqual(played.rows, ((True,), (), (False,)))
        self.assertEqual(played.success_counts(), (1, 0, 0))
        self.assertEqual(played.remaining(), (3, 4, 3))
        self.assertEqual(played.undo(2).undo(0), game_state)

    def test_undo_on_empty_row_is_a_no_op(self):
        game_state = GameState(num_slots=3)
        self.assertIs(game_state.undo(1), game_state)

    def test_record_past_capacity_is_rejected(self):
        game_state = GameState(num_slots=1).record(1, True)
        with self.assertRaises(ValidationError):
            game_state.record(1, False)

    def test_with_num_slots_truncates_rows(self):
        game_state = GameState(num_slots=3, rows=((True, False, True), (), (False,)))
        shrunk = game_state.with_num_slots(2)
        self.assertEqual(shrunk.rows, ((True, False), (), (False,)))
        self.assertEqual(shrunk.level, game_state.level)

    def test_invalid_game_states(self):
        with self.assertRaises(ValidationError):
            GameState(num_slots=0)
        with self.assertRaises(ValidationError):
            GameState(num_slots=33)
        with self.assertRaises(ValidationError):
            GameState(num_slots=1, rows=((True, True), (), ()))
        with self.assertRaises(ValidationError):
            GameState(rows=((), ()))
        with self.assertRaises(ValidationError):
            GameState(level=0.75)

    def test_is_complete(self):
        game_state = GameState(num_slots=1, rows=((True,), (False,), (True,)))
        self.assertTrue(game_state.is_complete)
        self.assertTrue(game_state.to_state().is_terminal)


if __name__ == "__main__":
    unittest.main()
