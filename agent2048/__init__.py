"""
Board simulation and heuristic strategies for the 2048 game.
"""

__version__ = '0.1.0'
