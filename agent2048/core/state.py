"""
Immutable game state shared between the engine, the strategies and the agent runner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from numpy import array, int64, ndarray

from agent2048.core.gamemove import legal_actions_mask


def as_grid(cells: ndarray | Sequence[Sequence[int | None]]) -> ndarray:
    """
    Build a read-only board from an array or a nested sequence.

    Parameters
    ----------
    cells : ndarray or Sequence[Sequence[int | None]]
        Square matrix of cells. ``None`` and ``0`` both mean empty.

    Returns
    -------
    ndarray
        A fresh ``int64`` board that cannot be written to.

    Raises
    ------
    ValueError
        If the cells do not form a non-empty square matrix.
    """
    if isinstance(cells, ndarray):
        board = cells.astype(int64, copy=True)
    else:
        board = array([[0 if cell is None else cell for cell in row] for row in cells], dtype=int64)

    if board.ndim != 2 or board.shape[0] == 0 or board.shape[0] != board.shape[1]:
        raise ValueError(f'Board must be a non-empty square matrix, got shape {board.shape}')

    board.setflags(write=False)
    return board


def to_rows(grid: ndarray) -> list[list[int | None]]:
    """Convert a board back into nested lists, empty cells as ``None``."""
    return [[int(cell) if cell else None for cell in row] for row in grid.tolist()]


@dataclass(frozen=True, eq=False)
class GameState:
    """
    Snapshot of a game.

    Attributes
    ----------
    grid : ndarray
        Read-only N x N board, ``0`` for empty cells.
    score : int
        Accumulated score, never negative.
    is_game_over : bool
        True exactly when no direction changes the board.
    move_count : int
        Number of real moves played so far.
    """

    grid: ndarray
    score: int = 0
    is_game_over: bool = False
    move_count: int = 0

    def __post_init__(self):
        """Freeze the grid and validate counters."""
        object.__setattr__(self, 'grid', as_grid(self.grid))
        if self.score < 0:
            raise ValueError(f'Score must be non-negative, got {self.score}')
        if self.move_count < 0:
            raise ValueError(f'Move count must be non-negative, got {self.move_count}')

    @classmethod
    def from_grid(
        cls, cells: ndarray | Iterable[Iterable[int | None]], score: int = 0, move_count: int = 0
    ) -> GameState:
        """
        Create a state whose ``is_game_over`` flag is derived from the board.

        Parameters
        ----------
        cells : ndarray or nested sequence
            The board.
        score : int, optional
            Current score (default is 0).
        move_count : int, optional
            Moves already played (default is 0).

        Returns
        -------
        GameState
            The new state.
        """
        grid = as_grid(cells)
        finished = not any(legal_actions_mask(grid).values())
        return cls(grid=grid, score=score, is_game_over=finished, move_count=move_count)

    @property
    def size(self) -> int:
        """Dimension N of the board."""
        return int(self.grid.shape[0])

    def same_grid(self, other: GameState | ndarray) -> bool:
        """Structural equality of the boards."""
        other_grid = other.grid if isinstance(other, GameState) else other
        return bool(self.grid.shape == other_grid.shape and (self.grid == other_grid).all())
