"""
Endgame specialist: a phase-driven policy tuned for the 1024 -> 2048 transition.

The phase is recomputed from the board on every call, never stored on the strategy.
"""

from __future__ import annotations

from enum import Enum
from itertools import combinations

from numpy import ndarray

from agent2048.core import Direction, GameState, find_merges, get_valid_moves, simulate_move
from agent2048.utils import (
    can_tiles_merge,
    count_empty,
    count_mergeable_pairs,
    find_tile_positions,
    has_clear_path,
    is_corner,
    is_edge,
    max_tile,
    max_tile_in_corner,
    monotonic_columns,
    monotonic_rows,
)

from .base import MoveEvaluation, Strategy

WIN_TILE = 2048


class Phase(str, Enum):
    """Stage of play, from the largest tile and the free space."""

    ENDGAME = 'endgame'
    LATE_GAME = 'late game'
    SURVIVAL = 'survival'
    FOUNDATION = 'foundation'


def phase_for(highest: int, empty: int) -> Phase:
    """
    Derive the phase of a board.

    Parameters
    ----------
    highest : int
        Largest tile on the board.
    empty : int
        Number of empty cells.

    Returns
    -------
    Phase
        ``ENDGAME`` from 1024, ``LATE_GAME`` from 512, ``SURVIVAL`` with six or fewer empty cells,
        ``FOUNDATION`` otherwise.
    """
    if highest >= 1024:
        return Phase.ENDGAME
    if highest >= 512:
        return Phase.LATE_GAME
    if empty <= 6:
        return Phase.SURVIVAL
    return Phase.FOUNDATION


def win_path_blocking(grid: ndarray) -> int:
    """
    Count pairs of high tiles (256 and above) that cannot reach each other.

    Only pairs sharing a row or a column are checked for a clear straight path; any other pair is assumed to
    be reachable eventually.
    """
    high_tiles = find_tile_positions(grid, 256) + find_tile_positions(grid, 512) + find_tile_positions(grid, 1024)
    blocked = 0
    for first, second in combinations(high_tiles, 2):
        if (first[0] == second[0] or first[1] == second[1]) and not has_clear_path(grid, first, second):
            blocked += 1
    return blocked


def positioning_score(grid: ndarray) -> int:
    """50 when the largest tile sits in a corner, plus 10 per monotonic row and per monotonic column."""
    score = 50 if max_tile_in_corner(grid) else 0
    return score + 10 * monotonic_rows(grid) + 10 * monotonic_columns(grid)


class EndgameStrategy(Strategy):
    """
    Specialised for 1024 -> 2048 transitions and winning positions.

    Each phase has its own scorer:

    - endgame: keep two 1024 tiles mergeable, favour corners and edges, avoid blocking high tiles;
    - late game: score gained, board organisation and free space;
    - survival: maximise the empty cells left by the move;
    - foundation: score gained with a slight bias towards left and down.
    """

    key = 'endgame'
    name = 'Endgame Specialist'
    description = 'Specialized for 1024 to 2048 transitions and winning positions'

    # ##>: A move that creates the goal tile outranks every positional consideration.
    COMPLETION_BONUS = 100_000

    def phase(self, state: GameState) -> Phase:
        """Phase of the given state."""
        return phase_for(max_tile(state.grid), count_empty(state.grid))

    def get_next_move(self, state: GameState) -> Direction | None:
        valid_moves = get_valid_moves(state)
        if not valid_moves:
            return None

        phase = self.phase(state)
        return self.best_by({move: self.score_move(state, move, phase) for move in valid_moves})

    def score_move(self, state: GameState, move: Direction, phase: Phase) -> float:
        """
        Score a valid move under the scorer of ``phase``.

        Parameters
        ----------
        state : GameState
            The current state.
        move : Direction
            The candidate direction.
        phase : Phase
            The phase whose scorer applies.

        Returns
        -------
        float
            The move score; higher is better.
        """
        grid, score_delta = simulate_move(state, move)

        if phase is Phase.ENDGAME:
            return self._endgame_score(state, move, grid)
        if phase is Phase.LATE_GAME:
            return score_delta * 50 + positioning_score(grid) * 10 + count_empty(grid) * 20
        if phase is Phase.SURVIVAL:
            return count_empty(grid)

        bias = 10 if move in (Direction.LEFT, Direction.DOWN) else 0
        return score_delta * 100 + bias

    def _endgame_score(self, state: GameState, move: Direction, grid: ndarray) -> float:
        score = 0.0

        if any(merge.result == WIN_TILE for merge in find_merges(state, move)):
            score += self.COMPLETION_BONUS

        # ##: Two 1024 tiles can meet on the next move.
        if can_tiles_merge(grid, 1024):
            score += 10_000

        tiles_1024 = find_tile_positions(grid, 1024)
        if len(tiles_1024) >= 2:
            for position in tiles_1024:
                if is_corner(position, grid.shape[0]):
                    score += 200
                elif is_edge(position, grid.shape[0]):
                    score += 100
            score += 500 * count_mergeable_pairs(grid, 1024)

        if len(find_tile_positions(grid, 512)) >= 2:
            score += 300 * count_mergeable_pairs(grid, 512)

        score -= win_path_blocking(grid) * 1000

        # ##: Room to manoeuvre.
        empty = count_empty(grid)
        score += empty * 50 if empty >= 2 else -500
        return score

    def explain_move(self, move: Direction, state: GameState) -> str:
        label = Direction(move).value.upper()
        phase = self.phase(state)
        if phase is Phase.ENDGAME:
            return f'{label}: ENDGAME - Setting up for 2048 creation'
        if phase is Phase.LATE_GAME:
            return f'{label}: LATE GAME - Building toward 1024'
        if phase is Phase.SURVIVAL:
            return f'{label}: SURVIVAL - Keeping game alive'
        return f'{label}: FOUNDATION - Building strong base'

    def evaluate_move(self, state: GameState, move: Direction) -> MoveEvaluation:
        phase = self.phase(state)
        if phase is Phase.ENDGAME:
            win_probability, risk, reasoning = 0.8, 'high', 'Endgame positioning for 2048 creation'
        elif phase is Phase.LATE_GAME:
            win_probability, risk, reasoning = 0.4, 'medium', 'Building toward 1024 tile'
        elif phase is Phase.SURVIVAL:
            win_probability, risk, reasoning = 0.1, 'medium', 'Maximising free space to stay alive'
        else:
            win_probability, risk, reasoning = 0.1, 'low', 'Foundation building'

        return self.describe(
            state,
            move,
            score=self.score_move(state, move, phase),
            label=phase.value,
            reasoning=reasoning,
            win_probability=win_probability,
            risk_level=risk,
        )
