"""
Move-selection strategies and the registry that builds them from their identifiers.
"""

import logging

from .base import MoveEvaluation, MoveReport, Strategy
from .corner import CornerStrategy
from .endgame import EndgameStrategy, Phase
from .expectimax import ExpectimaxStrategy
from .greedy import GreedyStrategy
from .monte_carlo import MonteCarloStrategy
from .risk_taking import RiskTakingStrategy
from .smoothness import SmoothnessStrategy
from .snake import SnakeStrategy
from .win_probability import WinProbabilityStrategy

# ##>: Module logger.
_logger = logging.getLogger(__name__)

STRATEGIES: dict[str, type[Strategy]] = {
    strategy.key: strategy
    for strategy in (
        CornerStrategy,
        SnakeStrategy,
        GreedyStrategy,
        SmoothnessStrategy,
        ExpectimaxStrategy,
        EndgameStrategy,
        RiskTakingStrategy,
        MonteCarloStrategy,
        WinProbabilityStrategy,
    )
}

DEFAULT_STRATEGY = CornerStrategy.key


def create_strategy(name: str | None = None, **kwargs) -> Strategy:
    """
    Build a strategy from its identifier.

    Parameters
    ----------
    name : str, optional
        Registry identifier, matched case-insensitively. Defaults to ``DEFAULT_STRATEGY``.
    **kwargs
        Forwarded to the strategy constructor.

    Returns
    -------
    Strategy
        A new strategy instance. Unknown identifiers fall back to ``DEFAULT_STRATEGY`` with a warning.
    """
    key = (name or DEFAULT_STRATEGY).strip().lower()
    if key not in STRATEGIES:
        _logger.warning('Unknown strategy %r, falling back to %r', name, DEFAULT_STRATEGY)
        return STRATEGIES[DEFAULT_STRATEGY]()
    return STRATEGIES[key](**kwargs)


__all__ = [
    "DEFAULT_STRATEGY",
    "STRATEGIES",
    "CornerStrategy",
    "EndgameStrategy",
    "ExpectimaxStrategy",
    "GreedyStrategy",
    "MonteCarloStrategy",
    "MoveEvaluation",
    "MoveReport",
    "Phase",
    "RiskTakingStrategy",
    "SmoothnessStrategy",
    "SnakeStrategy",
    "Strategy",
    "WinProbabilityStrategy",
    "create_strategy",
]
