"""
Set of tests for the board simulation engine.
"""

from unittest import TestCase, main

import numpy as np
from numpy.random import PCG64DXSM, default_rng
from numpy.testing import assert_array_equal

from agent2048.core import (
    DIRECTIONS,
    Direction,
    GameState,
    Merge,
    after_state,
    apply_move,
    as_grid,
    fill_cells,
    find_merges,
    get_valid_moves,
    illegal_actions,
    is_done,
    is_valid_move,
    merge_line,
    new_game,
    next_state,
    simulate_move,
    slide_and_merge,
    to_rows,
)

PACKED = [[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 2]]


def random_board(generator, size: int = 4) -> np.ndarray:
    """Board of random powers of two with some empty cells."""
    exponents = generator.integers(0, 8, size=(size, size))
    return np.where(exponents == 0, 0, 2**exponents)


class TestMergeLine(TestCase):
    """Tests for compacting and merging a single line."""

    def test_merge_pair(self):
        score, line = merge_line(np.array([2, 2, 4, 0]))
        self.assertEqual(score, 4)
        assert_array_equal(line, [4, 4])

    def test_merged_tile_does_not_merge_again(self):
        score, line = merge_line(np.array([4, 4, 8, 0]))
        self.assertEqual(score, 8)
        assert_array_equal(line, [8, 8])

    def test_three_equal_tiles(self):
        score, line = merge_line(np.array([2, 2, 2, 0]))
        self.assertEqual(score, 4)
        assert_array_equal(line, [4, 2])

    def test_two_pairs(self):
        score, line = merge_line(np.array([2, 2, 2, 2]))
        self.assertEqual(score, 8)
        assert_array_equal(line, [4, 4])

    def test_single_and_empty_line(self):
        """Lines with fewer than two tiles are only compacted."""
        self.assertEqual(merge_line(np.array([0, 0, 8, 0]))[0], 0)
        assert_array_equal(merge_line(np.array([0, 0, 8, 0]))[1], [8])
        assert_array_equal(merge_line(np.zeros(4, dtype=int))[1], [])

    def test_slide_and_merge_pads_with_zeros(self):
        board = np.array([[0, 2, 0, 2], [4, 0, 0, 0], [0, 0, 0, 0], [2, 4, 8, 16]])
        score, result = slide_and_merge(board)
        self.assertEqual(score, 4)
        assert_array_equal(result, [[4, 0, 0, 0], [4, 0, 0, 0], [0, 0, 0, 0], [2, 4, 8, 16]])


class TestSimulateMove(TestCase):
    """Tests for the pure move simulation."""

    def test_row_merges_left(self):
        state = GameState.from_grid([[2, 2, 4, None], [None] * 4, [None] * 4, [None] * 4])
        grid, delta = simulate_move(state, Direction.LEFT)
        self.assertEqual(to_rows(grid)[0], [4, 4, None, None])
        self.assertEqual(delta, 4)

    def test_merge_happens_once_per_adjacency(self):
        state = GameState.from_grid([[4, 2, 2, 4], [None] * 4, [None] * 4, [None] * 4])
        grid, delta = simulate_move(state, 'left')
        self.assertEqual(to_rows(grid)[0], [4, 4, 4, None])
        self.assertEqual(delta, 4)

    def test_column_merges_down_from_the_bottom(self):
        state = GameState.from_grid([[None] * 4, [8, None, None, None], [8, None, None, None], [8, None, None, None]])
        grid, delta = simulate_move(state, Direction.DOWN)
        assert_array_equal(grid[:, 0], [0, 0, 8, 16])
        self.assertEqual(delta, 16)

    def test_every_direction(self):
        board = np.array([[2, 0, 0, 2], [0, 0, 0, 0], [0, 0, 0, 0], [2, 0, 0, 0]])
        expected = {
            Direction.UP: [[4, 0, 0, 2], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]],
            Direction.DOWN: [[0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [4, 0, 0, 2]],
            Direction.LEFT: [[4, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [2, 0, 0, 0]],
            Direction.RIGHT: [[0, 0, 0, 4], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 2]],
        }
        for direction, rows in expected.items():
            with self.subTest(direction=direction):
                assert_array_equal(simulate_move(board, direction)[0], rows)

    def test_input_is_not_modified(self):
        state = GameState.from_grid([[2, 2, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 4]])
        before = state.grid.copy()
        for direction in DIRECTIONS:
            simulate_move(state, direction)
        assert_array_equal(state.grid, before)
        self.assertFalse(state.grid.flags.writeable)

    def test_tile_sum_and_occupancy(self):
        """A move preserves the tile sum and never adds occupied cells."""
        generator = default_rng(PCG64DXSM(7))
        for _ in range(50):
            board = random_board(generator)
            for direction in DIRECTIONS:
                grid, delta = simulate_move(board, direction)
                self.assertEqual(grid.sum(), board.sum())
                self.assertLessEqual(np.count_nonzero(grid), np.count_nonzero(board))
                self.assertGreaterEqual(delta, 0)

    def test_valid_moves_match_simulation(self):
        """A direction is valid exactly when its simulation changes the board."""
        generator = default_rng(PCG64DXSM(11))
        for _ in range(50):
            board = random_board(generator)
            expected = [d for d in DIRECTIONS if not np.array_equal(simulate_move(board, d)[0], board)]
            self.assertEqual(get_valid_moves(board), expected)
            self.assertEqual(illegal_actions(board), [d for d in DIRECTIONS if d not in expected])

    def test_apply_move(self):
        state = GameState.from_grid([[2, 2, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]], score=10)
        moved = apply_move(state, Direction.RIGHT)
        self.assertEqual(moved.score, 14)
        self.assertEqual(moved.move_count, 1)
        self.assertEqual(np.count_nonzero(moved.grid), 1)


class TestValidMoves(TestCase):
    """Tests for move legality and terminal detection."""

    def test_packed_board_is_terminal(self):
        state = GameState.from_grid(PACKED)
        self.assertEqual(get_valid_moves(state), [])
        self.assertTrue(state.is_game_over)
        self.assertTrue(is_done(state))

    def test_packed_board_with_a_pair(self):
        board = np.array(PACKED)
        board[3, 3] = 4
        # ##>: The new pair sits on both the last row and the last column.
        self.assertEqual(get_valid_moves(board), list(DIRECTIONS))
        self.assertFalse(is_done(board))

    def test_order(self):
        board = np.array([[0, 0, 0, 0], [0, 2, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
        self.assertEqual(get_valid_moves(board), list(DIRECTIONS))
        self.assertTrue(is_valid_move(board, 'up'))

    def test_blocked_direction(self):
        board = np.array([[2, 4, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
        self.assertNotIn(Direction.UP, get_valid_moves(board))
        self.assertNotIn(Direction.LEFT, get_valid_moves(board))
        self.assertFalse(is_valid_move(board, Direction.LEFT))


class TestMerges(TestCase):
    """Tests for the merge listing."""

    def test_find_merges(self):
        board = np.array([[2, 2, 4, 4], [8, 0, 8, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
        merges = find_merges(board, Direction.LEFT)
        self.assertEqual(merges, [Merge(2, 4), Merge(4, 8), Merge(8, 16)])
        self.assertEqual(str(merges[0]), '2+2=4')

    def test_no_merge(self):
        self.assertEqual(find_merges(np.array(PACKED), Direction.UP), [])


class TestGameState(TestCase):
    """Tests for the immutable state."""

    def test_nested_lists_and_none(self):
        state = GameState.from_grid([[None, 2], [4, None]])
        assert_array_equal(state.grid, [[0, 2], [4, 0]])
        self.assertEqual(state.size, 2)
        self.assertEqual(to_rows(state.grid), [[None, 2], [4, None]])

    def test_grid_is_read_only_copy(self):
        cells = np.zeros((4, 4), dtype=int)
        state = GameState(grid=cells)
        cells[0, 0] = 2
        self.assertEqual(state.grid[0, 0], 0)
        with self.assertRaises(ValueError):
            state.grid[0, 0] = 4

    def test_invalid_states(self):
        with self.assertRaises(ValueError):
            as_grid([[2, 0, 0], [0, 0, 0]])
        with self.assertRaises(ValueError):
            GameState(grid=np.zeros((4, 4)), score=-1)
        with self.assertRaises(ValueError):
            GameState(grid=np.zeros((4, 4)), move_count=-1)

    def test_same_grid(self):
        first = GameState.from_grid(PACKED)
        self.assertTrue(first.same_grid(GameState.from_grid(PACKED, score=8)))
        self.assertFalse(first.same_grid(np.zeros((4, 4))))


class TestSpawns(TestCase):
    """Tests for the game-loop randomness."""

    def test_new_game(self):
        state = new_game(generator=default_rng(PCG64DXSM(42)))
        self.assertEqual(np.count_nonzero(state.grid), 2)
        self.assertTrue(np.all(np.isin(state.grid[state.grid != 0], [2, 4])))
        self.assertEqual(state.score, 0)
        with self.assertRaises(ValueError):
            new_game(size=1)

    def test_seeded_games_repeat(self):
        first = new_game(generator=default_rng(PCG64DXSM(3)))
        second = new_game(generator=default_rng(PCG64DXSM(3)))
        self.assertTrue(first.same_grid(second))

    def test_fill_cells_stops_when_full(self):
        board = np.array(PACKED)
        board[0, 0] = 0
        fill_cells(board, number_tile=3)
        self.assertEqual(np.count_nonzero(board), 16)

    def test_next_state(self):
        state = GameState.from_grid([[2, 2, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
        following = next_state(state, Direction.LEFT, generator=default_rng(PCG64DXSM(0)))
        self.assertEqual(following.score, 4)
        self.assertEqual(following.move_count, 1)
        self.assertEqual(np.count_nonzero(following.grid), 2)

    def test_next_state_invalid_move(self):
        state = GameState.from_grid([[2, 4, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
        self.assertIs(next_state(state, Direction.LEFT), state)

    def test_after_state(self):
        board = np.array([[2, 4, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
        outcomes = after_state(board)
        self.assertEqual(len(outcomes), 2 * 14)
        self.assertAlmostEqual(sum(probability for _, probability in outcomes), 1.0)


if __name__ == '__main__':
    main()
