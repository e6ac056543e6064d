"""
Monte Carlo Tree Search over 2048 boards.
"""

from .node import Chance, Decision
from .search import monte_carlo_search

__all__ = ["Chance", "Decision", "monte_carlo_search"]
