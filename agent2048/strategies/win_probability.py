"""
Win probability: rate every move by its estimated chance of eventually reaching 2048.

The estimate blends a short look-ahead over the player's moves, the win rate of a few random rollouts with
real spawns, and a heuristic read of the board.
"""

from __future__ import annotations

from dataclasses import dataclass

from numpy import ndarray
from numpy.random import PCG64DXSM, default_rng

from agent2048.core import Direction, GameState, fill_cells, get_valid_moves, simulate_move
from agent2048.utils import count_empty, count_value, max_tile, max_tile_in_corner, monotonic_columns, monotonic_rows

from .base import MoveEvaluation, Strategy

WIN_TILE = 2048

# ##>: Blend of the three estimates: look-ahead, rollouts, heuristic.
LOOK_AHEAD_WEIGHT, ROLLOUT_WEIGHT, HEURISTIC_WEIGHT = 0.4, 0.4, 0.2


@dataclass(frozen=True)
class WinPath:
    """Plan suggested by the largest tile after a move."""

    name: str
    reasoning: str


def organization(grid: ndarray) -> float:
    """
    Score the layout of a board in ``[0, 1]``.

    Each monotonic row or column adds ``1 / size`` and a largest tile in a corner adds 0.5.
    """
    score = (monotonic_rows(grid) + monotonic_columns(grid)) / grid.shape[0]
    if max_tile_in_corner(grid):
        score += 0.5
    return min(score, 1.0)


def heuristic_win_probability(grid: ndarray) -> float:
    """
    Estimate the chance of reaching 2048 from the tiles already built.

    Parameters
    ----------
    grid : ndarray
        The board.

    Returns
    -------
    float
        A base value by largest tile (1.0 from 2048, 0.7 from 1024, 0.3 from 512, 0.1 from 256, 0.01 below)
        with bonuses for pairs of big tiles, scaled by the free space and the layout, capped at 1.
    """
    highest = max_tile(grid)
    tiles_1024, tiles_512, tiles_256 = count_value(grid, 1024), count_value(grid, 512), count_value(grid, 256)

    if highest >= WIN_TILE:
        probability = 1.0
    elif highest >= 1024:
        probability = 0.7 + (0.2 if tiles_1024 >= 2 else 0.0) + (0.1 if tiles_512 >= 2 else 0.0)
    elif highest >= 512:
        probability = 0.3 + (0.2 if tiles_512 >= 2 else 0.0) + (0.1 if tiles_256 >= 4 else 0.0)
    elif highest >= 256:
        probability = 0.1 + (0.05 if tiles_256 >= 2 else 0.0)
    else:
        probability = 0.01

    empty = count_empty(grid)
    if empty <= 2:
        probability *= 0.2
    elif empty <= 4:
        probability *= 0.5
    elif empty >= 8:
        probability *= 1.3

    probability *= 0.5 + organization(grid) * 0.5
    return min(probability, 1.0)


def win_path(grid: ndarray) -> WinPath:
    """Next milestone for a board."""
    highest = max_tile(grid)
    if highest >= 1024:
        return WinPath('Endgame positioning', 'Focus on merging 1024 tiles to create 2048')
    if highest >= 512:
        return WinPath('Build to 1024', 'Merge 512s while maintaining board organization')
    return WinPath('Foundation building', 'Create larger tiles while keeping options open')


class WinProbabilityStrategy(Strategy):
    """
    Pick the move with the highest estimated chance of eventually reaching 2048.

    Parameters
    ----------
    look_ahead_depth : int, optional
        Player moves explored before falling back on the heuristic (default is 1).
    simulation_runs : int, optional
        Random rollouts per candidate move (default is 5).
    max_rollout_moves : int, optional
        Move limit of a single rollout (default is 200).
    seed : int, optional
        Seed of the rollout generator.
    """

    key = 'winprobability'
    name = 'Win Probability'
    description = 'Evaluates each move purely on probability of eventually reaching 2048'
    seeded = True

    def __init__(self, look_ahead_depth: int = 1, simulation_runs: int = 5, max_rollout_moves: int = 200, seed=None):
        if simulation_runs < 1:
            raise ValueError(f'simulation_runs must be positive, got {simulation_runs}')
        self.look_ahead_depth = look_ahead_depth
        self.simulation_runs = simulation_runs
        self.max_rollout_moves = max_rollout_moves
        self._generator = default_rng(PCG64DXSM(seed))

    def look_ahead(self, grid: ndarray, depth: int) -> float:
        """Average win probability over every valid move, ``depth`` moves deep, without spawns."""
        if max_tile(grid) >= WIN_TILE:
            return 1.0
        if depth == 0:
            return heuristic_win_probability(grid)

        valid_moves = get_valid_moves(grid)
        if not valid_moves:
            return 0.0
        return sum(self.look_ahead(simulate_move(grid, move)[0], depth - 1) for move in valid_moves) / len(valid_moves)

    def rollout(self, grid: ndarray) -> bool:
        """Play uniformly random moves with real spawns; True when 2048 appears."""
        board = grid.copy()
        for _ in range(self.max_rollout_moves):
            if max_tile(board) >= WIN_TILE:
                return True
            valid_moves = get_valid_moves(board)
            if not valid_moves:
                return False
            board, _ = simulate_move(board, valid_moves[self._generator.integers(len(valid_moves))])
            fill_cells(board, number_tile=1, generator=self._generator)
        return max_tile(board) >= WIN_TILE

    def rollout_win_rate(self, grid: ndarray) -> float:
        """Share of winning rollouts."""
        return sum(self.rollout(grid) for _ in range(self.simulation_runs)) / self.simulation_runs

    def win_probability(self, state: GameState, move: Direction) -> float:
        """
        Estimated chance of reaching 2048 after ``move``.

        Parameters
        ----------
        state : GameState
            The current state.
        move : Direction
            The candidate direction.

        Returns
        -------
        float
            1.0 when the move itself creates 2048, else the weighted blend of the look-ahead, the rollout win
            rate and the heuristic.
        """
        grid, _ = simulate_move(state, move)
        if max_tile(grid) >= WIN_TILE:
            return 1.0
        return (
            self.look_ahead(grid, self.look_ahead_depth) * LOOK_AHEAD_WEIGHT
            + self.rollout_win_rate(grid) * ROLLOUT_WEIGHT
            + heuristic_win_probability(grid) * HEURISTIC_WEIGHT
        )

    def get_next_move(self, state: GameState) -> Direction | None:
        valid_moves = get_valid_moves(state)
        return self.best_by({move: self.win_probability(state, move) for move in valid_moves})

    def explain_move(self, move: Direction, state: GameState) -> str:
        probability = self.win_probability(state, move)
        return f'{Direction(move).value.upper()}: {probability * 100:.1f}% chance of eventually reaching 2048'

    def evaluate_move(self, state: GameState, move: Direction) -> MoveEvaluation:
        probability = self.win_probability(state, move)
        path = win_path(simulate_move(state, move)[0])
        return self.describe(
            state,
            move,
            score=probability,
            label=f'{probability * 100:.1f}%',
            reasoning=path.reasoning,
            win_probability=probability,
            best_path=path.name,
        )
