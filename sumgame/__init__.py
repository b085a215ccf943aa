"""
SumGame Package
===============

Rules engine for a falling-blocks sum puzzle: pick blocks whose values add
up to the target before the stack reaches the top.

- sum_core: game engine, clock, Gymnasium environment, replays
- evaluation: seed bank and agent evaluation harness

All tunable parameters are in game_config.yaml.
"""
