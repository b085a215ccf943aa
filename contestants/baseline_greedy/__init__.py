"""
Baseline Greedy Agent Package

A simple heuristic agent that clears the largest exact combination of
block values it can find. Serves as a benchmark and example.
"""

from .agent import SumAgent, create_agent, find_value_combo

__all__ = ["SumAgent", "create_agent", "find_value_combo"]
