"""
Algorithmic agent: a strategy plus the explanation channel around it.
"""

import logging
from typing import Callable

from agent2048.core import Direction, GameState, get_valid_moves
from agent2048.strategies import MoveReport, Strategy, create_strategy

from .config import AgentConfig

# ##>: Module logger.
_logger = logging.getLogger(__name__)


class AlgorithmicAgent:
    """
    Chooses moves with one strategy, resolved once at construction.

    Parameters
    ----------
    config : AgentConfig, optional
        Agent configuration, defaults to ``AgentConfig()``.
    on_explanation : Callable[[Direction, str], None], optional
        Called with each chosen move and its explanation when ``config.explain_moves`` is set.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        on_explanation: Callable[[Direction, str], None] | None = None,
    ):
        self.config = config or AgentConfig()
        self.strategy: Strategy = create_strategy(self.config.strategy)
        self.on_explanation = on_explanation
        self.last_explanation: str | None = None

    def get_next_move(self, state: GameState) -> Direction | None:
        """
        Choose the next move.

        Parameters
        ----------
        state : GameState
            The current state.

        Returns
        -------
        Direction or None
            A valid move, or ``None`` when the game is over or no move is valid.
        """
        if state.is_game_over or not get_valid_moves(state):
            return None

        move = self.strategy.get_next_move(state)
        if move is not None and self.config.explain_moves:
            self.last_explanation = self.strategy.explain_move(move, state)
            _logger.info('%s: %s', self.strategy.name, self.last_explanation)
            if self.on_explanation is not None:
                self.on_explanation(move, self.last_explanation)
        return move

    def get_move_alternatives(self, state: GameState) -> MoveReport:
        """Evaluations of every valid move, as seen by the strategy."""
        return self.strategy.evaluate_all_moves(state)

    def __repr__(self) -> str:
        return f'AlgorithmicAgent(strategy={self.strategy.key!r}, speed={self.config.speed})'
