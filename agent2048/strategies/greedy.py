"""
Merge monster: always make the move that creates the most merges.
"""

from __future__ import annotations

from agent2048.core import DIRECTIONS, Direction, GameState, find_merges, get_valid_moves, simulate_move

from .base import MoveEvaluation, Strategy


class GreedyStrategy(Strategy):
    """Maximise the number of merges, then the points they earn."""

    key = 'greedy'
    name = 'Merge Monster'
    description = 'Always make the move that creates the most merges'

    def get_next_move(self, state: GameState) -> Direction | None:
        valid_moves = get_valid_moves(state)
        if not valid_moves:
            return None

        def rank(move: Direction) -> tuple[int, int, int]:
            _, score_delta = simulate_move(state, move)
            return len(find_merges(state, move)), score_delta, -DIRECTIONS.index(move)

        return max(valid_moves, key=rank)

    def explain_move(self, move: Direction, state: GameState) -> str:
        move = Direction(move)
        merges = len(find_merges(state, move))
        if merges > 0:
            return (
                f'I love to squish tiles together! Moving {move.value} to make {merges} '
                f'merge{"s" if merges > 1 else ""}! Nom nom nom!'
            )
        return f"Moving {move.value} to set up future merges! I'm always hungry for more!"

    def evaluate_move(self, state: GameState, move: Direction) -> MoveEvaluation:
        _, score_delta = simulate_move(state, move)
        merges = len(find_merges(state, move))
        return self.describe(
            state,
            move,
            score=merges * 10_000 + score_delta,
            label=f'{merges} merge{"s" if merges != 1 else ""}',
            reasoning=f'{merges} merges worth {score_delta} points',
        )
