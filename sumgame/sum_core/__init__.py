"""
Sum Core - The game engine and its supporting systems.

This module provides the rules engine, the host-side clock, the Gymnasium
environment wrapper and replay recording.

Main exports:
- GameEngine: State machine for one board (intents in, snapshots out)
- GameClock: Real-time driver that ticks the engine while a game is live
- GameSnapshot: Immutable state handed to renderers and agents
- SumGameEnv: Gymnasium environment for agents
- GameConfig: Configuration loaded from game_config.yaml
"""

from sumgame.sum_core.config_loader import GameConfig, load_config
from sumgame.sum_core.grid import Block, Grid
from sumgame.sum_core.game import GameEngine, SelectResult
from sumgame.sum_core.clock import ActiveTimer, GameClock
from sumgame.sum_core.state_snapshot import (
    GameSnapshot,
    MODE_CLASSIC,
    MODE_TIME,
    STATUS_GAMEOVER,
    STATUS_IDLE,
    STATUS_PLAYING,
)
from sumgame.sum_core.env_gym import SumGameEnv
from sumgame.sum_core.replay_recorder import (
    ReplayRecorder,
    record_episode,
    replay_actions,
    generate_replay_filename,
)

__all__ = [
    "GameConfig",
    "load_config",
    "Block",
    "Grid",
    "GameEngine",
    "SelectResult",
    "ActiveTimer",
    "GameClock",
    "GameSnapshot",
    "MODE_CLASSIC",
    "MODE_TIME",
    "STATUS_GAMEOVER",
    "STATUS_IDLE",
    "STATUS_PLAYING",
    "SumGameEnv",
    "ReplayRecorder",
    "record_episode",
    "replay_actions",
    "generate_replay_filename",
]
