"""Logarithmic reward scaling, so rollout scores stay comparable across game stages."""

from numpy import log2


def normalize_reward(reward: float, max_tile: int = 2 ** (4**2)) -> float:
    """
    Map a score onto ``[0, 1]`` on a log scale.

    Parameters
    ----------
    reward : float
        Points earned.
    max_tile : int, optional
        Largest reachable tile on a 4x4 board, mapped to 1.0 (default is 2**16).

    Returns
    -------
    float
        ``log2(reward) / log2(max_tile)``, or 0.0 for a non-positive reward.
    """
    if reward <= 0:
        return 0.0
    return float(log2(reward) / log2(max_tile))
