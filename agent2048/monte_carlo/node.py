"""
Monte Carlo Tree Search node classes for decision-making in the stochastic 2048 game.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from numpy import array_equal, ndarray, power
from numpy.random import Generator

from agent2048.core import Direction, after_state, get_valid_moves, simulate_move


@dataclass(kw_only=True, eq=False)
class Node(ABC):
    """
    Shared statistics of the two node kinds of the search tree.

    Attributes
    ----------
    state : np.ndarray
        The board held by the node.
    values : float
        Accumulated rewards from rollouts.
    visits : int
        Number of rollouts that went through the node.
    children : List
        List of child nodes.
    """

    state: ndarray
    values: float = 0.0
    visits: int = 0
    children: List = field(default_factory=list)

    @abstractmethod
    def fully_expanded(self) -> bool:
        """Whether no further child should be expanded yet."""

    @abstractmethod
    def add_child(self, generator: Generator) -> Node:
        """Expand one new child."""

    def update(self, reward: float) -> None:
        """
        Update node statistics after a rollout.

        Parameters
        ----------
        reward : float
            The reward received from the rollout.
        """
        self.values += reward
        self.visits += 1

    @property
    def mean_value(self) -> float:
        """Average reward, 0 for an unvisited node."""
        return self.values / self.visits if self.visits else 0.0


@dataclass(kw_only=True, eq=False)
class Decision(Node):
    """
    A board waiting for the player's move.

    Attributes
    ----------
    prior : float
        Probability of the spawn that produced this board.
    final : bool
        Whether this board is terminal.
    parent : Optional[Chance]
        The parent chance node.
    legal_moves : List[Direction]
        Valid moves from this board.
    """

    prior: float
    final: bool
    parent: Optional[Chance] = None
    legal_moves: List[Direction] = field(default_factory=list)

    def __post_init__(self):
        if not self.final:
            self.legal_moves = get_valid_moves(self.state)

    def fully_expanded(self) -> bool:
        """Whether every valid move has a chance node."""
        return len(self.children) == len(self.legal_moves)

    def add_child(self, generator: Generator) -> Chance:
        """
        Add a new chance node for an untried move.

        Parameters
        ----------
        generator : Generator
            Random generator picking the move.

        Returns
        -------
        Chance
            The node holding the board after the move.

        Raises
        ------
        ValueError
            If all moves have been tried.
        """
        tried = {child.action for child in self.children}
        untried_actions = [move for move in self.legal_moves if move not in tried]
        if not untried_actions:
            raise ValueError('Every valid move already has a chance node.')
        action = untried_actions[generator.integers(len(untried_actions))]
        child_state, reward = simulate_move(self.state, action)
        child = Chance(state=child_state, parent=self, action=action, reward=reward)
        self.children.append(child)
        return child


@dataclass(kw_only=True, eq=False)
class Chance(Node):
    """
    A board after the player's move, waiting for the tile spawn.

    Attributes
    ----------
    action : Direction
        The move that produced this board.
    reward : int
        Points earned by that move.
    parent : Decision
        The parent decision node.
    next_states : List[Tuple[np.ndarray, float]]
        Possible boards after the spawn and their probabilities.
    widening_alpha : float
        Exponent of the visit count in the widening limit.
    widening_constant : float
        Factor of the widening limit.
    """

    action: Direction
    parent: Decision
    reward: int = 0
    next_states: List[Tuple[ndarray, float]] = field(default_factory=list)
    widening_alpha: float = 0.25
    widening_constant: float = 1.0

    def __post_init__(self):
        self.next_states = after_state(self.state)

    def fully_expanded(self) -> bool:
        """Check if enough spawn outcomes have been explored according to progressive widening."""
        return len(self.children) >= min(
            len(self.next_states), self.widening_constant * power(self.visits, self.widening_alpha)
        )

    def add_child(self, generator: Generator) -> Decision:
        """
        Add a new decision node for an unexplored spawn outcome.

        Parameters
        ----------
        generator : Generator
            Random generator picking the outcome.

        Returns
        -------
        Decision
            The node holding the board after the spawn.

        Raises
        ------
        ValueError
            If every spawn outcome already has a node.
        """
        unvisited_outcomes = [
            (outcome, prior)
            for outcome, prior in self.next_states
            if not any(array_equal(outcome, child.state) for child in self.children)
        ]
        if not unvisited_outcomes:
            raise ValueError('Every spawn outcome already has a decision node.')

        outcome, prior = unvisited_outcomes[generator.integers(len(unvisited_outcomes))]
        child = Decision(state=outcome, prior=prior, final=not get_valid_moves(outcome), parent=self)
        self.children.append(child)
        return child
