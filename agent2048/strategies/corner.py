"""
Corner master: keep the biggest tile pinned in one corner.
"""

from __future__ import annotations

from math import log2

from agent2048.core import DIRECTIONS, Direction, GameState, find_merges, get_valid_moves, simulate_move
from agent2048.utils import max_tile, max_tile_position

from .base import MoveEvaluation, Strategy

# ##>: For each corner: the moves that push towards it, and the moves that pull away from it.
CORNER_MOVES: dict[str, tuple[tuple[Direction, ...], tuple[Direction, ...]]] = {
    'bottom-right': ((Direction.DOWN, Direction.RIGHT), (Direction.LEFT, Direction.UP)),
    'bottom-left': ((Direction.DOWN, Direction.LEFT), (Direction.RIGHT, Direction.UP)),
    'top-right': ((Direction.UP, Direction.RIGHT), (Direction.LEFT, Direction.DOWN)),
    'top-left': ((Direction.UP, Direction.LEFT), (Direction.RIGHT, Direction.DOWN)),
}


class CornerStrategy(Strategy):
    """
    Keep the biggest tile in a corner.

    Moves towards the preferred corner come first. Once the largest tile already sits in the corner, the two
    opposite moves are tried before them so the board keeps churning instead of stalling.
    """

    key = 'corner'
    name = 'Corner Master'
    description = 'Keep the biggest tile in a corner'

    def __init__(self, corner: str = 'bottom-right'):
        if corner not in CORNER_MOVES:
            raise ValueError(f'Unknown corner {corner!r}, expected one of {sorted(CORNER_MOVES)}')
        self.corner = corner

    def _corner_cell(self, size: int) -> tuple[int, int]:
        vertical, horizontal = self.corner.split('-')
        return (0 if vertical == 'top' else size - 1, 0 if horizontal == 'left' else size - 1)

    def max_in_corner(self, state: GameState) -> bool:
        """Whether the largest tile sits in the preferred corner."""
        return max_tile_position(state.grid) == self._corner_cell(state.size)

    def priority_moves(self, state: GameState) -> list[Direction]:
        """Directions to try first, in order."""
        towards, away = CORNER_MOVES[self.corner]
        if self.max_in_corner(state):
            return [*away, *towards]
        return list(towards)

    def displaces_max_tile(self, state: GameState, move: Direction) -> bool:
        """Whether ``move`` is one of the directions pulling away from the corner while the max tile is in it."""
        return self.max_in_corner(state) and move in CORNER_MOVES[self.corner][1]

    def get_next_move(self, state: GameState) -> Direction | None:
        valid_moves = get_valid_moves(state)
        priority = self.priority_moves(state)

        for move in priority:
            if move in valid_moves:
                return move

        for move in DIRECTIONS:
            if move not in priority and move in valid_moves:
                return move

        return None

    def explain_move(self, move: Direction, state: GameState) -> str:
        move = Direction(move)
        highest = max_tile(state.grid)
        corner_name = self.corner.replace('-', ' ')
        merges = find_merges(state, move)

        explanation = f'Moving {move.value.upper()}'
        if merges:
            explanation += f' to merge {", ".join(str(merge) for merge in merges)}'

        if self.max_in_corner(state):
            explanation += f', keeping {highest} safely in {corner_name} corner'
        else:
            explanation += f', working to move {highest} toward {corner_name} corner'

        valid_moves = get_valid_moves(state)
        if len(valid_moves) == 1:
            return explanation + ' (only valid move)'

        priority = self.priority_moves(state)
        if priority and priority[0] == move:
            explanation += f' (priority move for {corner_name})'
        elif move in priority:
            skipped = [other for other in priority[: priority.index(move)] if other in valid_moves]
            if skipped and merges and not find_merges(state, skipped[0]):
                explanation += f' ({skipped[0].value} has no merges)'

        for other in valid_moves:
            if other != move and self.displaces_max_tile(state, other):
                explanation += f' ({other.value} would move {highest} from corner)'
                break

        return explanation

    def evaluate_move(self, state: GameState, move: Direction) -> MoveEvaluation:
        grid, _ = simulate_move(state, move)
        merges = find_merges(state, move)
        priority = self.priority_moves(state)
        keeps_corner = max_tile_position(grid) == self._corner_cell(state.size)
        displaces = self.displaces_max_tile(state, move)

        score = len(merges) * 10 + sum(log2(merge.result) for merge in merges) * 5
        if keeps_corner:
            score += 100
        if move in priority:
            score += (4 - priority.index(move)) * 20
        if displaces:
            score -= 50

        reasons = []
        if merges:
            reasons.append(f'Creates {len(merges)} merge{"s" if len(merges) > 1 else ""}')
        if keeps_corner:
            reasons.append(f'keeps {max_tile(grid)} in corner')
        elif displaces:
            reasons.append(f'moves {max_tile(state.grid)} from corner')
        if priority and priority[0] == move:
            reasons.append('priority move')

        if not priority or move not in priority:
            label = 'fallback'
        elif priority[0] == move:
            label = 'priority'
        else:
            label = 'preferred'

        return self.describe(state, move, score=score, label=label, reasoning=', '.join(reasons) or 'Valid move')
