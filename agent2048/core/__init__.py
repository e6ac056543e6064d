"""
Board simulation for the 2048 game.

It includes the direction vocabulary, the immutable game state, functions for sliding and merging tiles, checking
legal moves and game termination, and the tile-spawn rules of the surrounding game loop.
"""

from .gameboard import (
    TILE_SPAWN_PROBS,
    Merge,
    after_state,
    apply_move,
    fill_cells,
    find_merges,
    get_valid_moves,
    is_done,
    is_valid_move,
    merge_line,
    new_game,
    next_state,
    simulate_move,
    slide_and_merge,
)
from .gamemove import DIRECTIONS, Direction, illegal_actions, legal_actions, legal_actions_mask
from .state import GameState, as_grid, to_rows

__all__ = [
    "DIRECTIONS",
    "Direction",
    "GameState",
    "Merge",
    "TILE_SPAWN_PROBS",
    "after_state",
    "apply_move",
    "as_grid",
    "fill_cells",
    "find_merges",
    "get_valid_moves",
    "illegal_actions",
    "is_done",
    "is_valid_move",
    "legal_actions",
    "legal_actions_mask",
    "merge_line",
    "new_game",
    "next_state",
    "simulate_move",
    "slide_and_merge",
    "to_rows",
]
