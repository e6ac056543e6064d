"""
Game move utilities for the 2048 engine: the direction vocabulary and the vectorised legality checks.
"""

from enum import Enum

from numpy import ndarray


class Direction(str, Enum):
    """
    A move direction.

    The value is the lower-case name, so ``Direction('left')`` resolves a textual direction.
    """

    UP = 'up'
    DOWN = 'down'
    LEFT = 'left'
    RIGHT = 'right'

    def __str__(self) -> str:
        return self.value


# ##>: Fixed enumeration order. Every tie between directions resolves to the earliest one here.
DIRECTIONS: tuple[Direction, ...] = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)

# ##>: Number of counter-clockwise quarter turns that bring a direction onto a left slide.
ROTATIONS: dict[Direction, int] = {Direction.LEFT: 0, Direction.UP: 1, Direction.RIGHT: 2, Direction.DOWN: 3}


def legal_actions_mask(state: ndarray) -> dict[Direction, bool]:
    """
    Get the legality of all four directions in a single pass.

    Parameters
    ----------
    state : ndarray
        The current game board, ``0`` marking empty cells.

    Returns
    -------
    dict[Direction, bool]
        For each direction, True when moving that way changes the board.

    Notes
    -----
    A direction is legal when some occupied cell has an empty neighbour on the side it moves
    towards, or when two adjacent occupied cells on that axis hold the same value. This is
    exactly the condition under which ``simulate_move`` returns a different grid.
    """
    # ##>: Compute horizontal adjacency once for left/right.
    left_cols, right_cols = state[:, :-1], state[:, 1:]
    h_can_merge = (left_cols != 0) & (left_cols == right_cols)

    # ##>: Compute vertical adjacency once for up/down.
    top_rows, bottom_rows = state[:-1, :], state[1:, :]
    v_can_merge = (top_rows != 0) & (top_rows == bottom_rows)

    # ##>: Check slide conditions per direction.
    left = (left_cols == 0) & (right_cols != 0)
    right = (right_cols == 0) & (left_cols != 0)
    up = (top_rows == 0) & (bottom_rows != 0)
    down = (bottom_rows == 0) & (top_rows != 0)

    return {
        Direction.UP: bool(up.any() or v_can_merge.any()),
        Direction.DOWN: bool(down.any() or v_can_merge.any()),
        Direction.LEFT: bool(left.any() or h_can_merge.any()),
        Direction.RIGHT: bool(right.any() or h_can_merge.any()),
    }


def legal_actions(state: ndarray) -> list[Direction]:
    """
    Determine legal directions for a board, in ``DIRECTIONS`` order.

    Parameters
    ----------
    state : ndarray
        The current game board.

    Returns
    -------
    list[Direction]
        Directions that change the board.
    """
    mask = legal_actions_mask(state)
    return [direction for direction in DIRECTIONS if mask[direction]]


def illegal_actions(state: ndarray) -> list[Direction]:
    """Directions that leave the board untouched, in ``DIRECTIONS`` order."""
    mask = legal_actions_mask(state)
    return [direction for direction in DIRECTIONS if not mask[direction]]
