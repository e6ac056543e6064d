"""
Monte Carlo tree search: pick the move whose random continuations most often reach big tiles.
"""

from __future__ import annotations

from numpy.random import PCG64DXSM, default_rng

from agent2048.core import Direction, GameState, get_valid_moves
from agent2048.monte_carlo import Decision, monte_carlo_search

from .base import MoveEvaluation, Strategy


class MonteCarloStrategy(Strategy):
    """UCT search over moves and spawns with win-focused rollouts."""

    key = 'mcts'
    name = 'Monte Carlo'
    description = 'Tree search with random rollouts rewarded for reaching 512, 1024 and 2048'
    seeded = True

    def __init__(self, iterations: int = 100, depth: int = 20, exploration_weight: float = 1.414, seed=None):
        if iterations < 1:
            raise ValueError(f'iterations must be positive, got {iterations}')
        self.iterations = iterations
        self.depth = depth
        self.exploration_weight = exploration_weight
        self._generator = default_rng(PCG64DXSM(seed))
        self._last_search: tuple[GameState, Decision] | None = None

    def search(self, state: GameState) -> Decision:
        """Search from ``state``, reusing the tree of the previous call for the same board."""
        if self._last_search is not None and self._last_search[0].same_grid(state):
            return self._last_search[1]
        root = monte_carlo_search(
            state.grid,
            iterations=self.iterations,
            generator=self._generator,
            depth=self.depth,
            exploration_weight=self.exploration_weight,
        )
        self._last_search = (state, root)
        return root

    def get_next_move(self, state: GameState) -> Direction | None:
        valid_moves = get_valid_moves(state)
        if len(valid_moves) <= 1:
            return valid_moves[0] if valid_moves else None

        root = self.search(state)
        return max(root.children, key=lambda child: child.visits).action

    def explain_move(self, move: Direction, state: GameState) -> str:
        explanation = f'{Direction(move).value.upper()}: MCTS found this path most likely to reach 2048'
        if self._last_search is not None and self._last_search[0].same_grid(state):
            child = next((child for child in self._last_search[1].children if child.action == move), None)
            if child is not None:
                explanation += f' ({child.visits} visits, mean reward {child.mean_value:.2f})'
        return explanation

    def evaluate_move(self, state: GameState, move: Direction) -> MoveEvaluation:
        root = self.search(state)
        child = next((child for child in root.children if child.action == move), None)
        visits = child.visits if child is not None else 0
        mean = child.mean_value if child is not None else 0.0
        return self.describe(
            state,
            move,
            score=mean,
            label=f'{visits} visits',
            reasoning=f'Mean rollout reward {mean:.2f} over {visits} visits',
            visits=visits,
        )
