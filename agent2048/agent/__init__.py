"""
Algorithmic agent, its background runner and the headless game used to simulate it.
"""

from .agent import AlgorithmicAgent
from .config import MAX_SPEED, MIN_SPEED, AgentConfig, clamp_speed
from .headless import GameRecording, HeadlessGame, MoveRecord, SimulationResult, run_simulation
from .runner import AgentRunner

__all__ = [
    "MAX_SPEED",
    "MIN_SPEED",
    "AgentConfig",
    "AgentRunner",
    "AlgorithmicAgent",
    "GameRecording",
    "HeadlessGame",
    "MoveRecord",
    "SimulationResult",
    "clamp_speed",
    "run_simulation",
]
