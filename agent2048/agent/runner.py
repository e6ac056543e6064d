"""
Background loop that plays an agent's moves at a fixed rate.
"""

import logging
import threading
from typing import Callable

from agent2048.core import Direction, GameState

from .agent import AlgorithmicAgent
from .config import clamp_speed

# ##>: Module logger.
_logger = logging.getLogger(__name__)


class AgentRunner:
    """
    Drives an agent on a daemon thread.

    Each tick fetches the current state, asks the agent for a move and hands it to the move callback, then waits
    ``1 / speed`` seconds. The loop ends by itself on a terminal state or when the agent has no move.

    Parameters
    ----------
    agent : AlgorithmicAgent
        The agent choosing the moves.
    """

    def __init__(self, agent: AlgorithmicAgent):
        self.agent = agent
        self._running = False
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        # ##>: Held while a move is delivered, and by stop().
        self._delivery_lock = threading.RLock()

    @property
    def speed(self) -> float:
        """Moves per second."""
        return self.agent.config.speed

    @speed.setter
    def speed(self, value: float) -> None:
        self.agent.config.speed = clamp_speed(value)

    @property
    def is_running(self) -> bool:
        """Whether the loop is active."""
        return self._running

    def start(self, get_state: Callable[[], GameState], on_move: Callable[[Direction], None]) -> None:
        """
        Start playing in the background. Does nothing if already running.

        Parameters
        ----------
        get_state : Callable[[], GameState]
            Returns the authoritative current state.
        on_move : Callable[[Direction], None]
            Receives each chosen move.
        """
        if self._running:
            return

        self._running = True
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop, args=(get_state, on_move, self._stop_event), name='agent-runner', daemon=True
        )
        self._thread.start()
        _logger.debug('Runner started with %s at %.1f moves/s', self.agent.strategy.key, self.speed)

    def stop(self) -> None:
        """Stop the loop. Once this returns no further move is delivered. Does nothing if already stopped."""
        self._stop_event.set()
        with self._delivery_lock:
            was_running, self._running = self._running, False

        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)
        self._thread = None

        if was_running:
            _logger.debug('Runner stopped')

    def step(self, state: GameState) -> Direction | None:
        """Run one synchronous decision on ``state``."""
        return self.agent.get_next_move(state)

    def _tick(
        self, get_state: Callable[[], GameState], on_move: Callable[[Direction], None], stop_event: threading.Event
    ) -> bool:
        state = get_state()
        if state is None or state.is_game_over:
            return False

        move = self.agent.get_next_move(state)
        if move is None:
            return False

        with self._delivery_lock:
            if stop_event.is_set():
                return False
            on_move(move)
        return True

    def _loop(
        self, get_state: Callable[[], GameState], on_move: Callable[[Direction], None], stop_event: threading.Event
    ) -> None:
        """Background loop that plays moves until stopped or the game ends."""
        try:
            while not stop_event.is_set():
                if not self._tick(get_state, on_move, stop_event):
                    break
                stop_event.wait(self.agent.config.interval)
        except Exception:
            _logger.exception('Runner stopped after a callback failure (strategy=%s)', self.agent.strategy.key)
        finally:
            with self._delivery_lock:
                if not stop_event.is_set():
                    self._running = False
                    _logger.debug('Runner finished')
