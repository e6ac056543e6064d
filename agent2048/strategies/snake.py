"""
Snake builder: fill the bottom row left to right, the next one right to left, and so on.
"""

from __future__ import annotations

from numpy import count_nonzero, ndarray

from agent2048.core import Direction, GameState, find_merges, get_valid_moves
from agent2048.utils import max_tile

from .base import MoveEvaluation, Strategy

FALLBACK_ORDER = (Direction.LEFT, Direction.RIGHT, Direction.DOWN, Direction.UP)


def empty_in_row(grid: ndarray, row: int) -> int:
    """Number of empty cells in one row."""
    return int(grid.shape[1] - count_nonzero(grid[row]))


def bottom_row_partial(grid: ndarray) -> bool:
    """Whether the bottom row holds at least one tile and at least one gap."""
    empty = empty_in_row(grid, -1)
    return 0 < empty < grid.shape[1]


def snake_sequence(grid: ndarray) -> tuple[Direction, ...]:
    """Preferred directions given how full the two bottom rows are."""
    if empty_in_row(grid, -1) > 0:
        return Direction.RIGHT, Direction.DOWN, Direction.LEFT
    if empty_in_row(grid, -2) > 0:
        return Direction.LEFT, Direction.DOWN, Direction.RIGHT
    return Direction.RIGHT, Direction.LEFT, Direction.DOWN


class SnakeStrategy(Strategy):
    """Build tiles in a snake/zigzag pattern."""

    key = 'snake'
    name = 'Snake Builder'
    description = 'Build tiles in a snake/zigzag pattern'

    def preference(self, state: GameState) -> list[Direction]:
        """
        All four directions in the order this strategy would try them.

        Parameters
        ----------
        state : GameState
            The current state.

        Returns
        -------
        list[Direction]
            Bottom-row filling first, then the zigzag sequence, then the fallback order.
        """
        grid = state.grid
        order: list[Direction] = []

        if bottom_row_partial(grid):
            order += [Direction.RIGHT, Direction.DOWN]
        if empty_in_row(grid, -1) < empty_in_row(grid, -2):
            order.append(Direction.DOWN)
        order += snake_sequence(grid)
        order += FALLBACK_ORDER

        # ##: Keep first occurrences only.
        return list(dict.fromkeys(order))

    def get_next_move(self, state: GameState) -> Direction | None:
        valid_moves = get_valid_moves(state)
        for move in self.preference(state):
            if move in valid_moves:
                return move
        return None

    def explain_move(self, move: Direction, state: GameState) -> str:
        move = Direction(move)
        grid = state.grid
        merges = find_merges(state, move)
        bottom_empty, second_empty = empty_in_row(grid, -1), empty_in_row(grid, -2)

        explanation = f'Moving {move.value.upper()}'
        if merges:
            explanation += f' to merge {", ".join(str(merge) for merge in merges)}'

        if move is Direction.DOWN and bottom_empty > 0:
            explanation += f', filling bottom row ({bottom_empty} empty)'
        elif move is Direction.RIGHT and bottom_row_partial(grid):
            explanation += ', organizing bottom row left-to-right'
        elif move is Direction.LEFT and bottom_empty == 0 and second_empty > 0:
            explanation += ', filling 2nd row right-to-left (snake pattern)'

        return explanation + f'. Keeping {int(count_nonzero(grid))} tiles organized, max: {max_tile(grid)}'

    def evaluate_move(self, state: GameState, move: Direction) -> MoveEvaluation:
        valid_order = [candidate for candidate in self.preference(state) if candidate in get_valid_moves(state)]
        rank = valid_order.index(move)
        return self.describe(
            state,
            move,
            score=len(valid_order) - rank,
            label='chosen' if rank == 0 else f'alternative #{rank}',
            reasoning=self.explain_move(move, state),
            rank=rank,
        )
