"""
Board features shared by the heuristic strategies: tile counts, positions, monotonicity, smoothness and the
straight-line reachability test between two tiles.
"""

from __future__ import annotations

from typing import Iterable

from numpy import abs as np_abs
from numpy import argwhere, count_nonzero, log2, ndarray, where

Position = tuple[int, int]


def max_tile(grid: ndarray) -> int:
    """Largest tile on the board, 0 for an empty board."""
    return int(grid.max()) if grid.size else 0


def count_empty(grid: ndarray) -> int:
    """Number of empty cells."""
    return int(grid.size - count_nonzero(grid))


def count_value(grid: ndarray, value: int) -> int:
    """Number of tiles holding exactly ``value``."""
    return int(count_nonzero(grid == value))


def find_tile_positions(grid: ndarray, value: int) -> list[Position]:
    """Positions of every tile equal to ``value``, in row-major order."""
    return [(int(row), int(col)) for row, col in argwhere(grid == value)]


def corner_positions(size: int) -> tuple[Position, ...]:
    """The four corners of an N x N board."""
    last = size - 1
    return (0, 0), (0, last), (last, 0), (last, last)


def is_corner(position: Position, size: int) -> bool:
    """Whether a cell is one of the four corners."""
    return position in corner_positions(size)


def is_edge(position: Position, size: int) -> bool:
    """Whether a cell lies on the outer ring (corners included)."""
    row, col = position
    return row in (0, size - 1) or col in (0, size - 1)


def describe_position(position: Position, size: int) -> str:
    """
    Name the region of the board a cell belongs to.

    Parameters
    ----------
    position : tuple[int, int]
        The ``(row, col)`` cell.
    size : int
        Dimension of the board.

    Returns
    -------
    str
        One of ``top-left``, ``top-right``, ``bottom-left``, ``bottom-right``, ``top edge``, ``bottom edge``,
        ``left edge``, ``right edge`` or ``center``.
    """
    row, col = position
    last = size - 1

    vertical = {0: 'top', last: 'bottom'}.get(row)
    horizontal = {0: 'left', last: 'right'}.get(col)
    if vertical and horizontal:
        return f'{vertical}-{horizontal}'
    if vertical:
        return f'{vertical} edge'
    if horizontal:
        return f'{horizontal} edge'
    return 'center'


def max_tile_position(grid: ndarray) -> Position | None:
    """First position (row-major) holding the largest tile, ``None`` on an empty board."""
    if not grid.any():
        return None
    row, col = argwhere(grid == grid.max())[0]
    return int(row), int(col)


def max_tile_in_corner(grid: ndarray) -> bool:
    """Whether any corner holds the largest tile."""
    highest = max_tile(grid)
    if highest == 0:
        return False
    return any(int(grid[position]) == highest for position in corner_positions(grid.shape[0]))


def is_monotonic(values: Iterable[int]) -> bool:
    """
    Check whether a line is entirely non-decreasing or entirely non-increasing.

    Parameters
    ----------
    values : Iterable[int]
        Cells of a row or column. Empty cells (``0``) are ignored.

    Returns
    -------
    bool
        True for monotonic lines. A line with at most one tile is vacuously monotonic.
    """
    tiles = [value for value in values if value]
    if len(tiles) <= 1:
        return True

    increasing = all(later >= earlier for earlier, later in zip(tiles, tiles[1:]))
    decreasing = all(later <= earlier for earlier, later in zip(tiles, tiles[1:]))
    return increasing or decreasing


def monotonic_rows(grid: ndarray) -> int:
    """Number of monotonic rows."""
    return sum(is_monotonic(row) for row in grid.tolist())


def monotonic_columns(grid: ndarray) -> int:
    """Number of monotonic columns."""
    return sum(is_monotonic(column) for column in grid.T.tolist())


def smoothness(grid: ndarray, log_scale: bool = False) -> float:
    """
    Penalise value gaps between neighbours.

    Parameters
    ----------
    grid : ndarray
        The board.
    log_scale : bool, optional
        Compare ``log2`` of the tiles instead of the raw values (default is False).

    Returns
    -------
    float
        Minus the sum of absolute differences between horizontally and vertically adjacent occupied cells.
        Zero is the smoothest possible board.
    """
    values = grid.astype('float64')
    if log_scale:
        values = log2(values, where=values != 0, out=values)

    occupied = grid != 0
    horizontal = where(occupied[:, :-1] & occupied[:, 1:], np_abs(values[:, :-1] - values[:, 1:]), 0.0)
    vertical = where(occupied[:-1, :] & occupied[1:, :], np_abs(values[:-1, :] - values[1:, :]), 0.0)
    return -float(horizontal.sum() + vertical.sum())


def has_clear_path(grid: ndarray, first: Position, second: Position) -> bool:
    """
    Check whether two tiles share a row or column with only empty cells between them.

    Parameters
    ----------
    grid : ndarray
        The board.
    first, second : tuple[int, int]
        The two cells.

    Returns
    -------
    bool
        True when a single move could bring them together. The test is symmetric in its two cells; tiles on
        different rows and columns never have a clear path.
    """
    (row_a, col_a), (row_b, col_b) = first, second

    if row_a == row_b:
        low, high = sorted((col_a, col_b))
        return not grid[row_a, low + 1 : high].any()

    if col_a == col_b:
        low, high = sorted((row_a, row_b))
        return not grid[low + 1 : high, col_a].any()

    return False


def can_tiles_merge(grid: ndarray, value: int) -> bool:
    """Whether any two tiles of ``value`` have a clear path between them."""
    positions = find_tile_positions(grid, value)
    return any(
        has_clear_path(grid, positions[i], positions[j])
        for i in range(len(positions))
        for j in range(i + 1, len(positions))
    )


def count_mergeable_pairs(grid: ndarray, value: int) -> int:
    """Number of pairs of ``value`` tiles with a clear path between them."""
    positions = find_tile_positions(grid, value)
    return sum(
        has_clear_path(grid, positions[i], positions[j])
        for i in range(len(positions))
        for j in range(i + 1, len(positions))
    )


def adjacent_pairs(grid: ndarray) -> int:
    """Number of adjacent equal occupied pairs, horizontally and vertically."""
    horizontal = (grid[:, :-1] != 0) & (grid[:, :-1] == grid[:, 1:])
    vertical = (grid[:-1, :] != 0) & (grid[:-1, :] == grid[1:, :])
    return int(horizontal.sum() + vertical.sum())
