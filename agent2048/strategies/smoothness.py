"""
Smoothness master: prefer boards where neighbouring tiles are close in value.
"""

from __future__ import annotations

from dataclasses import dataclass

from numpy import ndarray

from agent2048.core import Direction, GameState, get_valid_moves, simulate_move
from agent2048.utils import count_empty, is_monotonic, max_tile_in_corner, smoothness

from .base import MoveEvaluation, Strategy


@dataclass(frozen=True)
class SmoothnessWeights:
    """Relative weight of each board feature."""

    smoothness: float = 0.5
    monotonicity: float = 0.3
    empty_tiles: float = 0.15
    corner_bonus: float = 0.05


@dataclass(frozen=True)
class BoardScore:
    """Weighted total and its components."""

    score: float
    smoothness: float
    monotonicity: float
    empty_tiles: int
    corner_bonus: float


def ordered_lines(grid: ndarray) -> int:
    """10 points per row or column holding two or more tiles in monotonic order."""
    lines = grid.tolist() + grid.T.tolist()
    return 10 * sum(1 for line in lines if sum(1 for cell in line if cell) > 1 and is_monotonic(line))


class SmoothnessStrategy(Strategy):
    """Weighted blend of smoothness, monotonicity, free space and corner placement."""

    key = 'smoothness'
    name = 'Smoothness Master'
    description = 'Keep neighbouring tiles close in value so they can merge'

    def __init__(self, weights: SmoothnessWeights | None = None):
        self.weights = weights or SmoothnessWeights()

    def score_board(self, grid: ndarray) -> BoardScore:
        """Evaluate a board."""
        smooth = smoothness(grid)
        monotonicity = ordered_lines(grid)
        empty = count_empty(grid)
        corner = 50.0 if max_tile_in_corner(grid) else 0.0

        score = (
            smooth * self.weights.smoothness
            + monotonicity * self.weights.monotonicity
            + empty * 10 * self.weights.empty_tiles
            + corner * self.weights.corner_bonus
        )
        return BoardScore(
            score=score, smoothness=smooth, monotonicity=monotonicity, empty_tiles=empty, corner_bonus=corner
        )

    def get_next_move(self, state: GameState) -> Direction | None:
        valid_moves = get_valid_moves(state)
        return self.best_by({move: self.score_board(simulate_move(state, move)[0]).score for move in valid_moves})

    def explain_move(self, move: Direction, state: GameState) -> str:
        result = self.score_board(simulate_move(state, move)[0])

        reasons = []
        if result.smoothness == 0:
            reasons.append('smooth board')
        if result.monotonicity > 0:
            reasons.append(f'good order ({result.monotonicity:.1f})')
        if result.empty_tiles > 0:
            reasons.append(f'{result.empty_tiles} empty spaces')
        if result.corner_bonus > 0:
            reasons.append('corner positioning')

        main_reason = reasons[0] if reasons else 'best available option'
        return f'{Direction(move).value.upper()}: Prioritizing {main_reason} (total: {result.score:.1f})'

    def evaluate_move(self, state: GameState, move: Direction) -> MoveEvaluation:
        result = self.score_board(simulate_move(state, move)[0])
        return self.describe(
            state,
            move,
            score=result.score,
            label='corner' if result.corner_bonus else 'open',
            reasoning=(
                f'Smoothness-based: smooth={result.smoothness:.1f}, '
                f'mono={result.monotonicity:.1f}, empty={result.empty_tiles}'
            ),
            smoothness=result.smoothness,
            monotonicity=result.monotonicity,
        )
