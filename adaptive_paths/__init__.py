"""Adaptive Paths - grid path search with moving obstacles and a learned policy.

This package couples an A* planner that replans around moving obstacles
with a tabular Q-Learning agent trained on the same grid.
"""

__version__ = "1.0.0"
__author__ = "Adaptive Paths Demo"
