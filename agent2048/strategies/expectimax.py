"""
Expectimax: depth-limited search over player moves and tile spawns with a weighted board heuristic.

Chance nodes sample the first few empty cells, weight the 2 and 4 spawns by their probabilities and keep the
worst weighted outcome, so the search plays against an adversarial spawn.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from math import log2

from numpy import argwhere, ndarray

from agent2048.core import (
    TILE_SPAWN_PROBS,
    Direction,
    GameState,
    Merge,
    find_merges,
    get_valid_moves,
    simulate_move,
)
from agent2048.utils import adjacent_pairs, count_empty, max_tile, max_tile_in_corner, smoothness

from .base import MoveEvaluation, Strategy


@dataclass(frozen=True)
class HeuristicWeights:
    """Weights of the leaf evaluation."""

    empty_cells: float = 2.7
    max_tile_corner: float = 1.0
    smoothness: float = 0.1
    monotonicity: float = 1.0
    mergeability: float = 0.5
    score_gain: float = 0.001


@dataclass(frozen=True)
class BoardEvaluation:
    """Weighted score of a board and the features it was built from."""

    score: float
    empty_cells: int
    max_tile: int
    corner_bonus: float
    smoothness: float
    mergeability: float
    monotonicity: float


def log_monotonicity(grid: ndarray) -> float:
    """For every row and column, the larger of its total log2 increase and total log2 decrease."""
    total = 0.0
    for line in grid.tolist() + grid.T.tolist():
        increasing = decreasing = 0.0
        for current, following in zip(line, line[1:]):
            if current and following:
                delta = log2(following) - log2(current)
                if delta > 0:
                    increasing += delta
                else:
                    decreasing -= delta
        total += max(increasing, decreasing)
    return total


def mergeability(grid: ndarray) -> float:
    """Sum of log2 values of the tiles that have an equal neighbour."""
    size = grid.shape[0]
    total = 0.0
    for row, col in argwhere(grid != 0):
        value = grid[row, col]
        neighbours = [
            grid[row, col - 1] if col > 0 else 0,
            grid[row, col + 1] if col < size - 1 else 0,
            grid[row - 1, col] if row > 0 else 0,
            grid[row + 1, col] if row < size - 1 else 0,
        ]
        if value in neighbours:
            total += log2(value)
    return total


@dataclass
class MoveAnalysis:
    """Search result for one root move."""

    direction: Direction
    score: float
    evaluation: BoardEvaluation
    reasoning: list[str]
    merges: list[Merge]


class ExpectimaxStrategy(Strategy):
    """Look ahead a few plies and pick the move with the best guaranteed evaluation."""

    key = 'expectimax'
    name = 'Expectimax'
    description = 'Expectimax search with weighted heuristics and detailed move reasoning'

    def __init__(self, max_depth: int = 3, chance_samples: int = 6, weights: HeuristicWeights | None = None):
        self.max_depth = max_depth
        self.chance_samples = chance_samples
        self.weights = weights or HeuristicWeights()

    def evaluate_board(self, grid: ndarray, current_score: int) -> BoardEvaluation:
        """
        Evaluate a leaf board.

        Parameters
        ----------
        grid : ndarray
            The board.
        current_score : int
            Game score reached along the searched line.

        Returns
        -------
        BoardEvaluation
            The weighted score and its components.
        """
        highest = max_tile(grid)
        empty = count_empty(grid)
        corner = log2(highest) * 10 if highest and max_tile_in_corner(grid) else 0.0
        smooth = smoothness(grid, log_scale=True)
        merge = mergeability(grid)
        mono = log_monotonicity(grid)

        score = (
            empty * self.weights.empty_cells
            + corner * self.weights.max_tile_corner
            + smooth * self.weights.smoothness
            + mono * self.weights.monotonicity
            + merge * self.weights.mergeability
            + current_score * self.weights.score_gain
        )
        return BoardEvaluation(
            score=score,
            empty_cells=empty,
            max_tile=highest,
            corner_bonus=corner,
            smoothness=smooth,
            mergeability=merge,
            monotonicity=mono,
        )

    def search(self, grid: ndarray, depth: int, player_turn: bool, current_score: int) -> BoardEvaluation:
        """
        Recursive search.

        Parameters
        ----------
        grid : ndarray
            The board at this node.
        depth : int
            Remaining plies.
        player_turn : bool
            True on move nodes, False on spawn nodes.
        current_score : int
            Game score reached along the searched line.

        Returns
        -------
        BoardEvaluation
            Evaluation backed up to this node.
        """
        valid_moves = get_valid_moves(grid)
        if depth == 0 or not valid_moves:
            return self.evaluate_board(grid, current_score)

        if player_turn:
            best = None
            for move in valid_moves:
                child, gain = simulate_move(grid, move)
                result = self.search(child, depth - 1, False, current_score + gain)
                if best is None or result.score > best.score:
                    best = result
            return best

        empty_cells = argwhere(grid == 0)[: self.chance_samples]
        if len(empty_cells) == 0:
            return self.evaluate_board(grid, current_score)

        worst = None
        for cell in empty_cells:
            outcomes = []
            for value, probability in TILE_SPAWN_PROBS.items():
                child = grid.copy()
                child[tuple(cell)] = value
                outcomes.append((self.search(child, depth - 1, True, current_score), probability))

            weighted = replace(outcomes[0][0], score=sum(result.score * probability for result, probability in outcomes))
            if worst is None or weighted.score < worst.score:
                worst = weighted
        return worst

    def analyze_all_moves(self, state: GameState) -> list[MoveAnalysis]:
        """Search every valid root move, in ``DIRECTIONS`` order."""
        analysis = []
        for move in get_valid_moves(state):
            grid, gain = simulate_move(state, move)
            evaluation = self.search(grid, self.max_depth - 1, False, state.score + gain)
            merges = find_merges(state, move)
            analysis.append(
                MoveAnalysis(
                    direction=move,
                    score=evaluation.score,
                    evaluation=evaluation,
                    reasoning=self.generate_reasoning(state.grid, merges, evaluation),
                    merges=merges,
                )
            )
        return analysis

    @staticmethod
    def generate_reasoning(grid: ndarray, merges: list[Merge], evaluation: BoardEvaluation) -> list[str]:
        """Up to three short reasons, most important first."""
        reasoning = []

        if merges:
            total = sum(merge.result for merge in merges)
            if any(merge.result >= 512 for merge in merges):
                reasoning.append(f'Creates high-value merges ({total} total)')
            elif len(merges) >= 2:
                reasoning.append(f'Maximizes merges ({len(merges)} simultaneous)')
            else:
                reasoning.append(f'Secures merge for {merges[0].result}')

        if evaluation.corner_bonus > 50:
            reasoning.append('Maintains max tile in corner position')
        elif evaluation.corner_bonus > 0:
            reasoning.append('Improves corner positioning')

        if evaluation.empty_cells >= count_empty(grid):
            reasoning.append(f'Preserves mobility ({evaluation.empty_cells} empty cells)')
        else:
            reasoning.append('Maintains adequate space')

        if evaluation.monotonicity > 0.5:
            reasoning.append('Improves tile organization')
        if adjacent_pairs(grid) and evaluation.mergeability > 0.4:
            reasoning.append('Sets up future merge opportunities')

        return reasoning[:3]

    def get_next_move(self, state: GameState) -> Direction | None:
        analysis = self.analyze_all_moves(state)
        return self.best_by({item.direction: item.score for item in analysis})

    def explain_move(self, move: Direction, state: GameState) -> str:
        move = Direction(move)
        analysis = self.analyze_all_moves(state)
        chosen = next((item for item in analysis if item.direction is move), None)
        if chosen is None:
            return f'Moving {move.value.upper()} (fallback choice)'

        explanation = f'Moving {move.value.upper()}'
        if chosen.merges:
            explanation += f' to merge {", ".join(str(merge) for merge in chosen.merges)}'
        if chosen.reasoning:
            explanation += f'. {", ".join(chosen.reasoning[:2])}'

        alternatives = sorted((item for item in analysis if item.direction is not move), key=lambda item: -item.score)
        if alternatives and chosen.score - alternatives[0].score > 0.1:
            explanation += (
                f' ({chosen.score - alternatives[0].score:.1f} points better than {alternatives[0].direction.value})'
            )
        return explanation

    def evaluate_move(self, state: GameState, move: Direction) -> MoveEvaluation:
        grid, gain = simulate_move(state, move)
        evaluation = self.search(grid, self.max_depth - 1, False, state.score + gain)
        reasoning = self.generate_reasoning(state.grid, find_merges(state, move), evaluation)
        return self.describe(
            state,
            move,
            score=evaluation.score,
            label=f'depth {self.max_depth}',
            reasoning=', '.join(reasoning),
            empty_cells=evaluation.empty_cells,
            monotonicity=evaluation.monotonicity,
            smoothness=evaluation.smoothness,
        )
