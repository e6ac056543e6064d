"""
Set of tests for the board features used by the strategies.
"""

from unittest import TestCase, main

import numpy as np

from agent2048.utils import (
    adjacent_pairs,
    can_tiles_merge,
    count_empty,
    count_mergeable_pairs,
    describe_position,
    find_tile_positions,
    has_clear_path,
    is_corner,
    is_edge,
    is_monotonic,
    max_tile,
    max_tile_in_corner,
    max_tile_position,
    monotonic_columns,
    monotonic_rows,
    normalize_reward,
    smoothness,
)


class TestTileQueries(TestCase):
    """Tests for counting and locating tiles."""

    def setUp(self):
        self.grid = np.array([[2, 0, 0, 0], [0, 8, 0, 0], [0, 0, 2, 0], [0, 0, 0, 8]])

    def test_counts(self):
        self.assertEqual(max_tile(self.grid), 8)
        self.assertEqual(count_empty(self.grid), 12)
        self.assertEqual(find_tile_positions(self.grid, 2), [(0, 0), (2, 2)])

    def test_max_tile_position(self):
        """The first largest tile in row-major order wins."""
        self.assertEqual(max_tile_position(self.grid), (1, 1))
        self.assertIsNone(max_tile_position(np.zeros((4, 4), dtype=int)))

    def test_max_tile_in_corner(self):
        self.assertTrue(max_tile_in_corner(self.grid))
        self.assertFalse(max_tile_in_corner(np.zeros((4, 4), dtype=int)))

    def test_regions(self):
        self.assertTrue(is_corner((3, 0), 4))
        self.assertFalse(is_corner((1, 0), 4))
        self.assertTrue(is_edge((1, 0), 4))
        self.assertFalse(is_edge((1, 2), 4))
        self.assertEqual(describe_position((0, 3), 4), 'top-right')
        self.assertEqual(describe_position((2, 0), 4), 'left edge')
        self.assertEqual(describe_position((3, 1), 4), 'bottom edge')
        self.assertEqual(describe_position((1, 2), 4), 'center')


class TestOrdering(TestCase):
    """Tests for monotonicity and smoothness."""

    def test_is_monotonic(self):
        self.assertTrue(is_monotonic([2, 4, 0, 8]))
        self.assertTrue(is_monotonic([16, 0, 8, 8]))
        self.assertFalse(is_monotonic([2, 8, 4, 0]))
        self.assertTrue(is_monotonic([0, 0, 4, 0]))

    def test_monotonic_lines(self):
        grid = np.array([[2, 4, 8, 16], [4, 2, 0, 32], [0, 0, 0, 0], [0, 0, 0, 2]])
        self.assertEqual(monotonic_rows(grid), 3)
        self.assertEqual(monotonic_columns(grid), 3)

    def test_smoothness(self):
        grid = np.array([[2, 4, 0, 0], [2, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
        self.assertEqual(smoothness(grid), -2.0)
        self.assertEqual(smoothness(grid, log_scale=True), -1.0)
        self.assertEqual(smoothness(np.full((4, 4), 8)), 0.0)

    def test_adjacent_pairs(self):
        grid = np.array([[2, 2, 2, 0], [2, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
        self.assertEqual(adjacent_pairs(grid), 3)


class TestClearPath(TestCase):
    """Tests for straight-line reachability between tiles."""

    def setUp(self):
        self.grid = np.array([[1024, 0, 0, 1024], [512, 4, 512, 0], [0, 0, 0, 0], [1024, 0, 0, 2]])

    def test_same_row(self):
        self.assertTrue(has_clear_path(self.grid, (0, 0), (0, 3)))
        self.assertFalse(has_clear_path(self.grid, (1, 0), (1, 2)))

    def test_same_column(self):
        self.assertFalse(has_clear_path(self.grid, (0, 0), (3, 0)))
        self.assertTrue(has_clear_path(self.grid, (0, 3), (3, 3)))

    def test_diagonal(self):
        self.assertFalse(has_clear_path(self.grid, (0, 3), (3, 0)))

    def test_symmetric(self):
        cells = [(row, col) for row in range(4) for col in range(4)]
        for first in cells:
            for second in cells:
                self.assertEqual(
                    has_clear_path(self.grid, first, second), has_clear_path(self.grid, second, first)
                )

    def test_mergeable_pairs(self):
        self.assertTrue(can_tiles_merge(self.grid, 1024))
        self.assertEqual(count_mergeable_pairs(self.grid, 1024), 1)
        self.assertFalse(can_tiles_merge(self.grid, 512))
        self.assertFalse(can_tiles_merge(self.grid, 2))


class TestNormalizeReward(TestCase):
    """Tests for the logarithmic reward scaling."""

    def test_scale(self):
        self.assertEqual(normalize_reward(0), 0.0)
        self.assertAlmostEqual(normalize_reward(2**8), 0.5)
        self.assertAlmostEqual(normalize_reward(2**16), 1.0)


if __name__ == '__main__':
    main()
