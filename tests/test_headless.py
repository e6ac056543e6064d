"""
Tests for the headless game and single-game simulations.
"""

from unittest import TestCase, main

import numpy as np
from numpy.testing import assert_array_equal

from agent2048.agent import HeadlessGame, run_simulation
from agent2048.core import Direction, GameState, get_valid_moves
from agent2048.strategies import GreedyStrategy


class TestHeadlessGame(TestCase):
    """Tests for the authoritative game state."""

    def test_initial_state(self):
        game = HeadlessGame(seed=42)
        self.assertEqual(np.count_nonzero(game.state.grid), 2)
        self.assertEqual(game.state.score, 0)
        self.assertEqual(game.empty_tiles, 14)
        self.assertFalse(game.has_won)

    def test_seed_repeats_the_game(self):
        first, second = HeadlessGame(seed=9), HeadlessGame(seed=9)
        for _ in range(20):
            move = first.valid_moves()[0]
            first.make_move(move)
            second.make_move(move)
        assert_array_equal(first.state.grid, second.state.grid)
        self.assertEqual(first.state.score, second.state.score)

    def test_make_move(self):
        game = HeadlessGame(seed=1)
        move = game.valid_moves()[0]
        self.assertTrue(game.make_move(move))
        self.assertEqual(game.state.move_count, 1)
        self.assertGreaterEqual(np.count_nonzero(game.state.grid), 2)

    def test_invalid_move_is_refused(self):
        game = HeadlessGame(seed=1)
        invalid = [move for move in Direction if move not in game.valid_moves()]
        state = game.state
        for move in invalid:
            self.assertFalse(game.make_move(move))
        self.assertIs(game.state, state)

    def test_reset(self):
        game = HeadlessGame(seed=4)
        game.make_move(game.valid_moves()[0])
        game.reset(seed=4)
        assert_array_equal(game.state.grid, HeadlessGame(seed=4).state.grid)
        self.assertEqual(game.state.move_count, 0)

    def test_win_detection(self):
        game = HeadlessGame(seed=0, win_tile=8)
        game._state = GameState.from_grid([[4, 4, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
        self.assertTrue(game.make_move(Direction.LEFT))
        self.assertTrue(game.has_won)
        self.assertEqual(game.max_tile, 8)

    def test_recording(self):
        game = HeadlessGame(seed=5)
        game.start_recording('greedy')
        for _ in range(3):
            game.make_move(game.valid_moves()[0], reasoning='first valid')
        recording = game.stop_recording()

        self.assertEqual(recording.strategy, 'greedy')
        self.assertEqual(recording.seed, 5)
        self.assertEqual([record.move_number for record in recording.moves], [1, 2, 3])
        self.assertEqual(recording.moves[-1].total_score, game.state.score)
        self.assertEqual(recording.moves[0].reasoning, 'first valid')
        self.assertIs(recording.final_state, game.state)
        self.assertIsNotNone(recording.end_time)
        self.assertIsNone(game.stop_recording())


class TestRunSimulation(TestCase):
    """Tests for full simulated games."""

    def test_limit(self):
        result = run_simulation('greedy', seed=3, max_moves=25)
        self.assertLessEqual(result.moves, 25)
        self.assertGreaterEqual(result.score, 0)
        self.assertEqual(result.max_tile, int(result.final_grid.max()))
        self.assertIsNone(result.recording)

    def test_deterministic(self):
        first = run_simulation(GreedyStrategy(), seed=11, max_moves=60)
        second = run_simulation(GreedyStrategy(), seed=11, max_moves=60)
        self.assertEqual((first.score, first.moves), (second.score, second.moves))
        assert_array_equal(first.final_grid, second.final_grid)

    def test_game_runs_to_the_end(self):
        result = run_simulation('snake', seed=2)
        self.assertTrue(result.is_game_over)
        self.assertEqual(get_valid_moves(result.final_grid), [])

    def test_recorded(self):
        result = run_simulation('corner', seed=6, max_moves=10, record=True)
        self.assertEqual(len(result.recording.moves), result.moves)
        self.assertEqual(result.recording.strategy, 'corner')


if __name__ == '__main__':
    main()
