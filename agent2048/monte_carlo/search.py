"""
Monte Carlo Tree Search (MCTS) for the 2048 game.

The tree alternates decision nodes (the player picks a move) and chance nodes (a tile spawns). Rollouts play
random moves for a bounded number of steps and are rewarded for the tiles they reach.
"""

from math import log, sqrt

from numpy import ndarray
from numpy.random import Generator

from agent2048.core import fill_cells, get_valid_moves, simulate_move
from agent2048.utils import max_tile, normalize_reward

from .node import Chance, Decision, Node

WIN_TILE = 2048

# ##>: Outcome bonuses of a rollout, checked from the highest tile down.
TILE_BONUSES = ((WIN_TILE, 10.0), (1024, 3.0), (512, 1.0))


def uct_select(node: Decision, exploration_weight: float) -> Chance:
    """
    Select a child node using the UCB1 formula.

    Parameters
    ----------
    node : Decision
        The parent node from which to select a child.
    exploration_weight : float
        The exploration weight parameter in the UCB1 formula.

    Returns
    -------
    Chance
        The child with the highest UCB1 score.

    Raises
    ------
    ValueError
        If the input node is not a Decision node.

    Notes
    -----
    Uses the UCB1 formula: exploitation + exploration_weight * sqrt(log(parent_visits) / child_visits)
    """
    if not isinstance(node, Decision):
        raise ValueError('UCB1 is only defined for Decision nodes.')

    log_visits = log(node.visits)
    return max(
        node.children,
        key=lambda child: child.values / child.visits + exploration_weight * sqrt(log_visits / child.visits),
    )


def select_child(node: Node, exploration_weight: float, generator: Generator) -> Node:
    """
    Walk down the tree to the first node that can still be expanded.

    Decision nodes pick their child with UCB1; chance nodes sample an expanded outcome in proportion to its
    spawn probability.

    Parameters
    ----------
    node : Node
        The node to start from.
    exploration_weight : float
        The exploration weight for the UCB1 calculation.
    generator : Generator
        Random generator for the chance nodes.

    Returns
    -------
    Node
        The selected node.
    """
    while node.children:
        if not node.fully_expanded():
            return node
        if isinstance(node, Decision):
            node = uct_select(node, exploration_weight)
        else:
            all_priors = sum(child.prior for child in node.children)
            index = generator.choice(len(node.children), p=[child.prior / all_priors for child in node.children])
            node = node.children[index]
    return node


def rollout_reward(highest: int, score: int) -> float:
    """
    Reward of one rollout.

    Parameters
    ----------
    highest : int
        Largest tile reached during the rollout.
    score : int
        Points earned during the rollout.

    Returns
    -------
    float
        The tile bonus plus the log-normalised score.
    """
    bonus = next((value for tile, value in TILE_BONUSES if highest >= tile), 0.0)
    return bonus + normalize_reward(score)


def simulate(node: Node, simulations: int, depth: int, generator: Generator) -> float:
    """
    Perform random rollouts from the given node.

    Parameters
    ----------
    node : Node
        The starting node for the rollouts.
    simulations : int
        The number of rollouts to perform.
    depth : int
        Maximum number of moves per rollout.
    generator : Generator
        Random generator for moves and spawns.

    Returns
    -------
    float
        The average reward over all rollouts.
    """
    total_reward = 0.0

    for _ in range(simulations):
        # ##: Initialize the state.
        if isinstance(node, Chance):
            states, priors = zip(*node.next_states)
            state = states[generator.choice(len(states), p=priors)]
        else:
            state = node.state.copy()

        highest, score = max_tile(state), 0

        # ##: Simulate until done, won or out of moves.
        for _ in range(depth):
            valid_moves = get_valid_moves(state)
            if not valid_moves or highest >= WIN_TILE:
                break
            state, reward = simulate_move(state, valid_moves[generator.integers(len(valid_moves))])
            state = fill_cells(state, number_tile=1, generator=generator)
            highest, score = max(highest, max_tile(state)), score + reward

        total_reward += rollout_reward(highest, score)

    return total_reward / simulations


def backpropagate(node: Node, reward: float) -> None:
    """
    Back-propagate the reward through the tree.

    Parameters
    ----------
    node : Node
        The starting node for backpropagation (typically a leaf node).
    reward : float
        The reward value to back-propagate.
    """
    while node is not None:
        node.update(reward)
        node = node.parent


def monte_carlo_search(
    state: ndarray,
    iterations: int,
    generator: Generator,
    simulations: int = 1,
    depth: int = 20,
    exploration_weight: float = 1.414,
) -> Decision:
    """
    Perform Monte Carlo Tree Search on the given board.

    Parameters
    ----------
    state : ndarray
        The initial board.
    iterations : int
        The number of selection/expansion/rollout/backpropagation cycles.
    generator : Generator
        Random generator used by the whole search.
    simulations : int, optional
        Rollouts per expanded node, by default 1.
    depth : int, optional
        Maximum moves per rollout, by default 20.
    exploration_weight : float, optional
        The exploration weight for UCB1, by default 1.414.

    Returns
    -------
    Decision
        The root node of the search tree.
    """
    root = Decision(state=state, final=not get_valid_moves(state), prior=1.0)

    for _ in range(iterations):
        # ##: Select a node and expand.
        node = select_child(root, exploration_weight, generator)
        if not (isinstance(node, Decision) and node.final):
            node = node.add_child(generator)

        # ##: Simulate and back-propagate.
        reward = simulate(node, simulations, depth, generator)
        backpropagate(node, reward)

    return root
