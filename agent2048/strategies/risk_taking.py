"""
Risk taker: trades average score for a better shot at the 2048 tile.
"""

from __future__ import annotations

from numpy import ndarray

from agent2048.core import Direction, GameState, get_valid_moves, simulate_move
from agent2048.utils import can_tiles_merge, count_empty, count_value, max_tile

from .base import MoveEvaluation, Strategy

LOW, MEDIUM, HIGH = 'low', 'medium', 'high'


def could_create_2048(grid: ndarray) -> bool:
    """
    Check whether a board is one step away from the goal.

    Two 1024 tiles with a clear path between them, or a single 1024 together with two 512 tiles that can
    merge into the second 1024.
    """
    tiles_1024 = count_value(grid, 1024)
    if tiles_1024 >= 2:
        return can_tiles_merge(grid, 1024)
    if tiles_1024 == 1 and count_value(grid, 512) >= 2:
        return can_tiles_merge(grid, 512)
    return False


def win_potential(grid: ndarray) -> float:
    """
    Estimate the chance of reaching 2048 from a board, in ``[0, 1]``.

    Parameters
    ----------
    grid : ndarray
        Board after the candidate move.

    Returns
    -------
    float
        A base value by largest tile (0.8 from 1024, 0.4 from 512, 0.2 from 256, 0.05 below), scaled down on
        crowded boards and up on open ones, and forced to 0.9 when 2048 is within reach.
    """
    highest = max_tile(grid)
    empty = count_empty(grid)

    if highest >= 1024:
        potential = 0.8
    elif highest >= 512:
        potential = 0.4
    elif highest >= 256:
        potential = 0.2
    else:
        potential = 0.05

    if empty <= 2:
        potential *= 0.3
    elif empty >= 6:
        potential *= 1.5

    if could_create_2048(grid):
        potential = 0.9

    return min(potential, 1.0)


def risk_level(before: ndarray, after: ndarray) -> str:
    """
    Classify how much a move tightens the board.

    Returns
    -------
    str
        ``high`` when two or more free cells are lost without a new largest tile, or when two or fewer remain;
        ``medium`` when a free cell is lost or four or fewer remain; ``low`` otherwise.
    """
    empty_before, empty_after = count_empty(before), count_empty(after)
    empty_change = empty_after - empty_before

    if empty_change <= -2 and max_tile(after) == max_tile(before):
        return HIGH
    if empty_after <= 2:
        return HIGH
    if empty_change <= -1 or empty_after <= 4:
        return MEDIUM
    return LOW


class RiskTakingStrategy(Strategy):
    """
    Willing to sacrifice average score for win probability.

    The base risk tolerance rises with progress: 0.8 from a 512 tile, 0.9 from a 1024 tile, and 1.0 whenever
    four or fewer cells are free.
    """

    key = 'risktaker'
    name = 'Risk Taker'
    description = 'Willing to sacrifice average score for win probability'

    def __init__(self, risk_tolerance: float = 0.7):
        self.risk_tolerance = risk_tolerance

    def current_tolerance(self, state: GameState) -> float:
        """Risk tolerance adapted to the state."""
        highest, empty = max_tile(state.grid), count_empty(state.grid)
        if empty <= 4:
            return 1.0
        if highest >= 1024:
            return 0.9
        if highest >= 512:
            return 0.8
        return self.risk_tolerance

    def get_next_move(self, state: GameState) -> Direction | None:
        valid_moves = get_valid_moves(state)
        if not valid_moves:
            return None

        tolerance = self.current_tolerance(state)
        return self.best_by({move: self.score_move(state, move, tolerance) for move in valid_moves})

    def score_move(self, state: GameState, move: Direction, tolerance: float) -> float:
        """
        Composite score of a move.

        Parameters
        ----------
        state : GameState
            The current state.
        move : Direction
            The candidate direction.
        tolerance : float
            Risk tolerance in ``[0, 1]``.

        Returns
        -------
        float
            Immediate gain plus 1000 times the win potential, adjusted by the risk level, the desperation
            bonus and the bonus for being one step away from 2048.
        """
        grid, score_delta = simulate_move(state, move)
        potential = win_potential(grid)
        risk = risk_level(state.grid, grid)

        score = score_delta + potential * 1000

        if risk == HIGH:
            if potential > 0.3:
                score += 2000 * tolerance
            else:
                score -= 1000 * (1 - tolerance)
        elif risk == MEDIUM:
            score += potential * 500 * tolerance

        # ##: Desperation bonus.
        if count_empty(grid) <= 3:
            score += 500 * tolerance

        if max_tile(grid) >= 1024 and could_create_2048(grid):
            score += 5000

        return score

    def explain_move(self, move: Direction, state: GameState) -> str:
        label = Direction(move).value.upper()
        grid, _ = simulate_move(state, move)
        risk = risk_level(state.grid, grid)

        if max_tile(state.grid) >= 1024:
            return f'{label}: HIGH RISK endgame move - going for 2048! ({risk})'
        if risk == HIGH:
            return f'{label}: RISKY move that could pay off big or fail spectacularly'
        if risk == MEDIUM:
            return f'{label}: Calculated risk - potential for major progress'
        return f'{label}: Conservative choice - building for future risks'

    def evaluate_move(self, state: GameState, move: Direction) -> MoveEvaluation:
        grid, _ = simulate_move(state, move)
        risk = risk_level(state.grid, grid)
        potential = win_potential(grid)

        if potential >= 0.7:
            potential_label = HIGH
        elif potential >= 0.3:
            potential_label = MEDIUM
        else:
            potential_label = LOW

        return self.describe(
            state,
            move,
            score=self.score_move(state, move, self.current_tolerance(state)),
            label=risk,
            reasoning=f'Risk: {risk}, Win potential: {potential_label}',
            win_potential=potential,
            risk_level=risk,
        )
