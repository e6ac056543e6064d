"""
Core functionality for simulating the 2048 game: sliding, merging and the tile-spawn rules.

``simulate_move`` and ``get_valid_moves`` are pure: they read a board and return a new one. Randomness only
enters through ``fill_cells``, ``new_game`` and ``next_state``, which model the game loop around the engine.
"""

from __future__ import annotations

from dataclasses import dataclass

from numpy import argwhere, array, int64, ndarray, rot90, zeros, zeros_like
from numpy.random import PCG64DXSM, Generator, default_rng

from agent2048.core.gamemove import ROTATIONS, Direction, legal_actions, legal_actions_mask
from agent2048.core.state import GameState

# ##>: Tile spawn probabilities for 2048 game (90% for 2, 10% for 4).
TILE_SPAWN_PROBS: dict[int, float] = {2: 0.9, 4: 0.1}

# ##>: Pre-computed tile values and probabilities for fast sampling.
_TILE_VALUES = [2, 4]
_TILE_PROBS = [0.9, 0.1]

# ##>: Module-level generator for performance (avoids repeated initialization).
_GENERATOR = default_rng(PCG64DXSM())


@dataclass(frozen=True)
class Merge:
    """A single merge performed by a move: two tiles of ``value`` became one tile of ``result``."""

    value: int
    result: int

    def __str__(self) -> str:
        return f'{self.value}+{self.value}={self.result}'


def _board(state: GameState | ndarray) -> ndarray:
    return state.grid if isinstance(state, GameState) else state


def merge_line(line: ndarray) -> tuple[int, ndarray]:
    """
    Merge adjacent equal values in a line towards its start and compute the score.

    Parameters
    ----------
    line : ndarray
        A 1D array representing one row (or a rotated column) of the board.

    Returns
    -------
    score : int
        The total score obtained from merging.
    merged_line : ndarray
        The occupied cells after compaction and merging, without padding.

    Notes
    -----
    - Zeros (empty cells) are ignored and removed before merging.
    - Merging occurs from the start of the line towards the end.
    - Each value can only be merged once per call: a merged tile never merges again in the same move.
    """
    # ##: Lines with zero or one tile cannot merge.
    non_zero = line[line != 0]
    if len(non_zero) <= 1:
        return 0, non_zero

    result = []
    score = 0

    # ##: Scan once, consuming the neighbour of every merged pair.
    i = 0
    while i < len(non_zero) - 1:
        if non_zero[i] == non_zero[i + 1]:
            merged = int(non_zero[i]) * 2
            result.append(merged)
            score += merged
            i += 2
        else:
            result.append(non_zero[i])
            i += 1

    if i == len(non_zero) - 1:
        result.append(non_zero[-1])

    return score, array(result, dtype=line.dtype)


def slide_and_merge(board: ndarray) -> tuple[int, ndarray]:
    """
    Slide the game board to the left, merge adjacent cells, and compute the score.

    Parameters
    ----------
    board : ndarray
        The game board represented as a 2D NumPy array.

    Returns
    -------
    score : int
        The total score obtained from all merges.
    updated_board : ndarray
        The updated game board after sliding and merging.

    Notes
    -----
    - The function operates on rows, effectively sliding left.
    - For other directions, rotate the board before calling this function.
    - Empty cells (zeros) are added to the right side of each row after merging.
    """
    result = zeros_like(board)
    score = 0

    for i, row in enumerate(board):
        score_row, merged_row = merge_line(row)
        score += score_row
        result[i, : len(merged_row)] = merged_row

    return score, result


def simulate_move(state: GameState | ndarray, direction: Direction | str) -> tuple[ndarray, int]:
    """
    Apply a direction to a board without spawning a new tile.

    Parameters
    ----------
    state : GameState or ndarray
        The current state, or its bare board.
    direction : Direction or str
        The direction to apply.

    Returns
    -------
    new_grid : ndarray
        The board after sliding and merging. The input is never modified.
    score_delta : int
        Sum of the values of every tile created by a merge.

    Notes
    -----
    The board is rotated so that the move becomes a left slide, every row is compacted and merged, and the
    rotation is undone. The result only depends on the board and the direction.
    """
    turns = ROTATIONS[Direction(direction)]
    reward, updated_board = slide_and_merge(rot90(_board(state), k=turns))
    return rot90(updated_board, k=-turns).copy(), reward


def apply_move(state: GameState, direction: Direction | str) -> GameState:
    """
    Compute the state reached by a simulated move.

    Parameters
    ----------
    state : GameState
        The current state.
    direction : Direction or str
        The direction to apply.

    Returns
    -------
    GameState
        A new state with the simulated board, the increased score and one more move. No tile is spawned.
    """
    grid, score_delta = simulate_move(state, direction)
    return GameState.from_grid(grid, score=state.score + score_delta, move_count=state.move_count + 1)


def get_valid_moves(state: GameState | ndarray) -> list[Direction]:
    """
    Directions whose simulation changes the board, in ``DIRECTIONS`` order.

    Parameters
    ----------
    state : GameState or ndarray
        The current state, or its bare board.

    Returns
    -------
    list[Direction]
        The valid directions. Empty exactly when the game is over.
    """
    return legal_actions(_board(state))


def is_valid_move(state: GameState | ndarray, direction: Direction | str) -> bool:
    """Whether a single direction changes the board."""
    return legal_actions_mask(_board(state))[Direction(direction)]


def is_done(state: GameState | ndarray) -> bool:
    """
    Check if the game has ended by determining if any moves are possible.

    Parameters
    ----------
    state : GameState or ndarray
        The current state of the game board.

    Returns
    -------
    bool
        True if the game is over (no moves possible), False otherwise.
    """
    return not any(legal_actions_mask(_board(state)).values())


def find_merges(state: GameState | ndarray, direction: Direction | str) -> list[Merge]:
    """
    List the merges a move would perform.

    Parameters
    ----------
    state : GameState or ndarray
        The current state, or its bare board.
    direction : Direction or str
        The direction to inspect.

    Returns
    -------
    list[Merge]
        One entry per merged pair, line by line.
    """
    turns = ROTATIONS[Direction(direction)]
    merges = []
    for row in rot90(_board(state), k=turns):
        non_zero = row[row != 0]
        i = 0
        while i < len(non_zero) - 1:
            if non_zero[i] == non_zero[i + 1]:
                merges.append(Merge(value=int(non_zero[i]), result=int(non_zero[i]) * 2))
                i += 2
            else:
                i += 1
    return merges


def after_state(state: ndarray) -> list[tuple[ndarray, float]]:
    """
    Generate all possible boards after a tile spawn, with their probabilities.

    Parameters
    ----------
    state : ndarray
        The board after a move, before the spawn.

    Returns
    -------
    list of tuple
        A list of tuples, each containing:
        - A possible next state of the board (ndarray)
        - The probability of that state occurring (float)

    Notes
    -----
    - If there are no empty cells, it returns the current state with 100% probability.
    - Probabilities account for both empty cell selection and new tile value (2 or 4).
    """
    empty_cells = argwhere(state == 0)
    num_empty_cells = len(empty_cells)

    if num_empty_cells == 0:
        return [(state, 1.0)]

    probable_states = []
    for cell in empty_cells:
        for new_value in _TILE_VALUES:
            new_state = state.copy()
            new_state[tuple(cell)] = new_value
            probable_states.append((new_state, TILE_SPAWN_PROBS[new_value] / num_empty_cells))

    return probable_states


def fill_cells(state: ndarray, number_tile: int, generator: Generator | None = None) -> ndarray:
    """
    Fill empty cells with new tiles (2 or 4).

    Parameters
    ----------
    state : ndarray
        The current state of the game board. **Modified in-place.**
    number_tile : int
        Number of new tiles to add.
    generator : Generator, optional
        Random generator to draw from; the module generator is used when omitted.

    Returns
    -------
    ndarray
        The same array reference with new tiles added.

    Notes
    -----
    - New tiles have a 90% chance of being 2 and a 10% chance of being 4.
    - If there are fewer empty cells than requested, it fills all available cells.
    - **This function mutates the input array.** Pass ``state.copy()`` if the original must be preserved.
    """
    rng = generator if generator is not None else _GENERATOR

    available_cells = argwhere(state == 0)
    count = min(number_tile, len(available_cells))
    if count > 0:
        values = rng.choice(_TILE_VALUES, size=count, p=_TILE_PROBS)
        chosen_indices = rng.choice(len(available_cells), size=count, replace=False)
        state[tuple(available_cells[chosen_indices].T)] = values
    return state


def new_game(size: int = 4, generator: Generator | None = None) -> GameState:
    """
    Create a fresh state with two random tiles.

    Parameters
    ----------
    size : int, optional
        Dimension of the board (default is 4).
    generator : Generator, optional
        Random generator for the initial tiles.

    Returns
    -------
    GameState
        The initial state, score 0.
    """
    if size < 2:
        raise ValueError(f'Board size must be at least 2, got {size}')
    board = fill_cells(zeros((size, size), dtype=int64), number_tile=2, generator=generator)
    return GameState.from_grid(board)


def next_state(state: GameState, direction: Direction | str, generator: Generator | None = None) -> GameState:
    """
    Play a real move: slide, merge and spawn one tile.

    Parameters
    ----------
    state : GameState
        The current state.
    direction : Direction or str
        The direction to play.
    generator : Generator, optional
        Random generator for the spawned tile.

    Returns
    -------
    GameState
        The following state. An invalid move returns ``state`` itself, unchanged.
    """
    if not is_valid_move(state, direction):
        return state

    board, reward = simulate_move(state, direction)
    board = fill_cells(board, number_tile=1, generator=generator)
    return GameState.from_grid(board, score=state.score + reward, move_count=state.move_count + 1)
