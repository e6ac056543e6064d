"""
Configuration of the algorithmic agent.
"""

from dataclasses import dataclass

MIN_SPEED = 0.5
MAX_SPEED = 10.0


def clamp_speed(speed: float) -> float:
    """Clamp a move rate to the supported range."""
    return min(max(float(speed), MIN_SPEED), MAX_SPEED)


@dataclass
class AgentConfig:
    """
    Configuration of an algorithmic agent.

    Attributes
    ----------
    speed : float
        Moves per second, clamped to [0.5, 10].
    strategy : str
        Registry identifier of the strategy.
    explain_moves : bool
        Whether each chosen move is explained.
    """

    speed: float = 2.0  # moves per second
    strategy: str = 'corner'
    explain_moves: bool = True

    def __post_init__(self):
        self.speed = clamp_speed(self.speed)

    @property
    def interval(self) -> float:
        """Seconds between two moves."""
        return 1.0 / self.speed
