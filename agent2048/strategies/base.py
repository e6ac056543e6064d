"""
Contract shared by every move-selection strategy, and the diagnostic records they produce.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Mapping

from agent2048.core import DIRECTIONS, Direction, GameState, find_merges, get_valid_moves, simulate_move
from agent2048.utils import count_empty, describe_position, max_tile_position


@dataclass(kw_only=True)
class MoveEvaluation:
    """
    Diagnostic bundle for one candidate direction.

    Attributes
    ----------
    direction : Direction
        The evaluated direction.
    score : float
        The strategy's numeric signal for this direction (higher is better).
    label : str
        Qualitative classification, e.g. a phase, a risk level or a priority.
    reasoning : str
        Human-readable rationale.
    score_delta : int
        Points gained by the move.
    merges : int
        Number of merges performed by the move.
    empty_after : int
        Empty cells left after the move (before any spawn).
    max_tile_position : str
        Region of the board holding the largest tile after the move.
    details : dict
        Strategy-specific values.
    """

    direction: Direction
    score: float
    label: str
    reasoning: str
    score_delta: int = 0
    merges: int = 0
    empty_after: int = 0
    max_tile_position: str = 'none'
    details: dict[str, float | str] = field(default_factory=dict)


@dataclass
class MoveReport:
    """Evaluations of every valid direction of a state."""

    valid_moves: list[Direction]
    evaluations: dict[Direction, MoveEvaluation]

    def best(self) -> Direction | None:
        """Direction with the highest evaluation score, first in ``DIRECTIONS`` order on ties."""
        if not self.valid_moves:
            return None
        return Strategy.best_by({move: self.evaluations[move].score for move in self.valid_moves})


class Strategy(ABC):
    """
    Base class for move-selection policies.

    Subclasses decide, explain and compare moves. They never mutate the state they receive; candidate moves
    are simulated through ``agent2048.core``.
    """

    #: Registry identifier.
    key: str = ''
    name: str = ''
    description: str = ''
    #: Whether the constructor takes a ``seed`` for its random generator.
    seeded: bool = False

    @abstractmethod
    def get_next_move(self, state: GameState) -> Direction | None:
        """
        Choose a move.

        Parameters
        ----------
        state : GameState
            The current state.

        Returns
        -------
        Direction or None
            A member of ``get_valid_moves(state)``, or ``None`` when there is no valid move.
        """

    @abstractmethod
    def explain_move(self, move: Direction, state: GameState) -> str:
        """Describe why ``move`` fits this strategy in ``state``."""

    @abstractmethod
    def evaluate_move(self, state: GameState, move: Direction) -> MoveEvaluation:
        """Evaluate a single valid direction."""

    def evaluate_all_moves(self, state: GameState) -> MoveReport:
        """
        Evaluate every valid direction.

        Parameters
        ----------
        state : GameState
            The current state.

        Returns
        -------
        MoveReport
            Valid moves in ``DIRECTIONS`` order and one evaluation per valid move.
        """
        valid_moves = get_valid_moves(state)
        return MoveReport(
            valid_moves=valid_moves,
            evaluations={move: self.evaluate_move(state, move) for move in valid_moves},
        )

    @staticmethod
    def best_by(scores: Mapping[Direction, float]) -> Direction | None:
        """
        Pick the highest-scoring direction.

        Parameters
        ----------
        scores : Mapping[Direction, float]
            Score per candidate direction.

        Returns
        -------
        Direction or None
            The best direction; ties go to the first one in ``DIRECTIONS`` order. ``None`` when empty.
        """
        best_move, best_score = None, float('-inf')
        for direction in DIRECTIONS:
            if direction in scores and scores[direction] > best_score:
                best_move, best_score = direction, scores[direction]
        return best_move

    @staticmethod
    def describe(state: GameState, move: Direction, score: float, label: str, reasoning: str, **details) -> MoveEvaluation:
        """Build an evaluation, filling the generic fields from a simulation of ``move``."""
        grid, score_delta = simulate_move(state, move)
        position = max_tile_position(grid)
        return MoveEvaluation(
            direction=move,
            score=float(score),
            label=label,
            reasoning=reasoning,
            score_delta=score_delta,
            merges=len(find_merges(state, move)),
            empty_after=count_empty(grid),
            max_tile_position=describe_position(position, state.size) if position else 'none',
            details=details,
        )

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}()'
