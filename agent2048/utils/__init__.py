"""
Board features and reward scaling shared by the strategies.
"""

from .features import (
    adjacent_pairs,
    can_tiles_merge,
    corner_positions,
    count_empty,
    count_mergeable_pairs,
    count_value,
    describe_position,
    find_tile_positions,
    has_clear_path,
    is_corner,
    is_edge,
    is_monotonic,
    max_tile,
    max_tile_in_corner,
    max_tile_position,
    monotonic_columns,
    monotonic_rows,
    smoothness,
)
from .normalize import normalize_reward

__all__ = [
    "adjacent_pairs",
    "can_tiles_merge",
    "corner_positions",
    "count_empty",
    "count_mergeable_pairs",
    "count_value",
    "describe_position",
    "find_tile_positions",
    "has_clear_path",
    "is_corner",
    "is_edge",
    "is_monotonic",
    "max_tile",
    "max_tile_in_corner",
    "max_tile_position",
    "monotonic_columns",
    "monotonic_rows",
    "normalize_reward",
    "smoothness",
]
