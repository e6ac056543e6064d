"""
Headless game loop used for simulations and benchmarks.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from numpy import ndarray
from numpy.random import PCG64DXSM, default_rng

from agent2048.core import Direction, GameState, get_valid_moves, is_valid_move, new_game, next_state
from agent2048.strategies import Strategy, create_strategy
from agent2048.utils import count_empty, max_tile

# ##>: Module logger.
_logger = logging.getLogger(__name__)

WIN_TILE = 2048


@dataclass(frozen=True)
class MoveRecord:
    """One played move."""

    move_number: int
    direction: Direction
    grid_before: ndarray
    grid_after: ndarray
    score_increase: int
    total_score: int
    reasoning: str | None = None


@dataclass
class GameRecording:
    """In-memory log of a game."""

    strategy: str
    seed: int | None
    start_time: float
    end_time: float | None = None
    moves: list[MoveRecord] = field(default_factory=list)
    final_state: GameState | None = None


@dataclass
class SimulationResult:
    """
    Outcome of a headless game.

    Attributes
    ----------
    score : int
        Final score.
    moves : int
        Number of moves played.
    max_tile : int
        Largest tile on the final board.
    is_win : bool
        Whether the win tile was reached.
    is_game_over : bool
        Whether the game ended with no valid move.
    final_grid : ndarray
        The final board.
    seed : int, optional
        Seed of the spawn generator.
    duration : float
        Wall time in seconds.
    recording : GameRecording, optional
        The move log, when recorded.
    """

    score: int
    moves: int
    max_tile: int
    is_win: bool
    is_game_over: bool
    final_grid: ndarray
    seed: int | None = None
    duration: float = 0.0
    recording: GameRecording | None = None


class HeadlessGame:
    """
    Authoritative game state for simulations, with seeded tile spawns.

    Parameters
    ----------
    size : int, optional
        Board dimension (default is 4).
    seed : int, optional
        Seed of the spawn generator; a fresh entropy seed is used when omitted.
    win_tile : int, optional
        Tile that counts as a win (default is 2048).
    """

    def __init__(self, size: int = 4, seed: int | None = None, win_tile: int = WIN_TILE):
        self.size = size
        self.win_tile = win_tile
        self.reset(seed)

    def reset(self, seed: int | None = None) -> GameState:
        """Start a new game and return its initial state."""
        self.seed = seed
        self._generator = default_rng(PCG64DXSM(seed))
        self._state = new_game(self.size, generator=self._generator)
        self._has_won = False
        self._recording: GameRecording | None = None
        return self._state

    @property
    def state(self) -> GameState:
        """The current state."""
        return self._state

    @property
    def has_won(self) -> bool:
        """Whether the win tile has been reached at some point."""
        return self._has_won

    @property
    def max_tile(self) -> int:
        """Largest tile on the board."""
        return max_tile(self._state.grid)

    @property
    def empty_tiles(self) -> int:
        """Number of empty cells."""
        return count_empty(self._state.grid)

    def valid_moves(self) -> list[Direction]:
        """Valid moves of the current state."""
        return get_valid_moves(self._state)

    def make_move(self, direction: Direction | str, reasoning: str | None = None) -> bool:
        """
        Play a move and spawn a tile.

        Parameters
        ----------
        direction : Direction or str
            The move to play.
        reasoning : str, optional
            Recorded with the move when recording.

        Returns
        -------
        bool
            False when the game is over or the move does not change the board.
        """
        if self._state.is_game_over or not is_valid_move(self._state, direction):
            return False

        before = self._state
        self._state = next_state(before, direction, generator=self._generator)

        if self._recording is not None:
            self._recording.moves.append(
                MoveRecord(
                    move_number=self._state.move_count,
                    direction=Direction(direction),
                    grid_before=before.grid,
                    grid_after=self._state.grid,
                    score_increase=self._state.score - before.score,
                    total_score=self._state.score,
                    reasoning=reasoning,
                )
            )

        if not self._has_won and self.max_tile >= self.win_tile:
            self._has_won = True
            _logger.debug('Reached %d after %d moves', self.win_tile, self._state.move_count)
        return True

    def start_recording(self, strategy: str) -> None:
        """Begin logging moves."""
        self._recording = GameRecording(strategy=strategy, seed=self.seed, start_time=time.time())

    def stop_recording(self) -> GameRecording | None:
        """Stop logging moves and return the log, or None if not recording."""
        recording, self._recording = self._recording, None
        if recording is not None:
            recording.end_time = time.time()
            recording.final_state = self._state
        return recording


def run_simulation(
    strategy: Strategy | str,
    seed: int | None = None,
    size: int = 4,
    max_moves: int = 10_000,
    win_tile: int = WIN_TILE,
    record: bool = False,
) -> SimulationResult:
    """
    Play a full game with one strategy.

    Parameters
    ----------
    strategy : Strategy or str
        A strategy, or its registry identifier.
    seed : int, optional
        Seed of the spawn generator.
    size : int, optional
        Board dimension (default is 4).
    max_moves : int, optional
        Safety limit on the number of moves (default is 10000).
    win_tile : int, optional
        Tile that counts as a win (default is 2048).
    record : bool, optional
        Whether to attach a move log to the result.

    Returns
    -------
    SimulationResult
        The final score, moves, max tile and timing.
    """
    if isinstance(strategy, str):
        strategy = create_strategy(strategy)

    start = time.perf_counter()
    game = HeadlessGame(size=size, seed=seed, win_tile=win_tile)
    if record:
        game.start_recording(strategy.key)

    moves = 0
    while not game.state.is_game_over and moves < max_moves:
        move = strategy.get_next_move(game.state)
        if move is None or not game.make_move(move):
            break
        moves += 1

    duration = time.perf_counter() - start
    recording = game.stop_recording()

    final = game.state
    result = SimulationResult(
        score=final.score,
        moves=moves,
        max_tile=game.max_tile,
        is_win=game.has_won,
        is_game_over=final.is_game_over,
        final_grid=final.grid,
        seed=seed,
        duration=duration,
        recording=recording,
    )
    _logger.debug('%s finished: score=%d moves=%d max=%d', strategy.key, result.score, moves, result.max_tile)
    return result
