"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the sum game.
Reward is always 0.0 - teams must compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from sumgame.sum_core.clock import GameClock
from sumgame.sum_core.config_loader import GameConfig, load_config
from sumgame.sum_core.game import GameEngine
from sumgame.sum_core.rules import OUTCOME_IGNORED
from sumgame.sum_core.state_snapshot import MODE_CLASSIC, MODES, validate_mode


class SumGameEnv(gym.Env):
    """
    Sum puzzle as a Gymnasium environment.

    Action Space:
        Discrete(rows * cols + 1)
        a < rows * cols selects cell (a // cols, a % cols).
        a == rows * cols is WAIT: one clock heartbeat passes.

    Observation Space:
        Dict with the board values, selection mask and scalar game state.

    Reward:
        Always 0.0. Teams must compute their own reward from the info dict.

    Info:
        Contains score, delta_score, high_score, outcome, steps, terminated_reason.
    """

    metadata = {
        "render_modes": ["ansi"],
        "render_fps": 4,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        mode: str = MODE_CLASSIC,
        render_mode: Optional[str] = None,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            mode: Default game mode, "classic" or "time".
            render_mode: "ansi" for a text board, None for headless.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        self._config = load_config(config_path)
        self._mode = validate_mode(mode)
        self.render_mode = render_mode
        self._debug = debug

        self._game = GameEngine(config=self._config)
        self._clock = GameClock(self._game)
        self._steps: int = 0

        grid = self._config.grid
        self._wait_action = grid.cell_count

        self.action_space = spaces.Discrete(self._config.num_actions)
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] SumGameEnv initialized")
            print(f"[DEBUG]   Grid: {grid.rows}x{grid.cols}, mode={self._mode}")
            print(f"[DEBUG]   Max actions: {self._config.caps.max_actions}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        grid = self._config.grid
        target = self._config.target
        timers = self._config.timers
        shape = (grid.rows, grid.cols)

        return spaces.Dict({
            "grid": spaces.Box(low=0, high=grid.max_value, shape=shape, dtype=np.int8),
            "selected": spaces.Box(low=0, high=1, shape=shape, dtype=np.int8),
            "target": spaces.Box(low=target.min, high=target.max, shape=(), dtype=np.int32),
            "current_sum": spaces.Box(
                low=0, high=grid.cell_count * grid.max_value, shape=(), dtype=np.int32
            ),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "time_left": spaces.Box(low=0, high=timers.time_cap, shape=(), dtype=np.int32),
            "next_row_in": spaces.Box(
                low=0, high=max(timers.time_cap, timers.classic_inject_ticks),
                shape=(), dtype=np.int32
            ),
            "occupied_count": spaces.Box(low=0, high=grid.cell_count, shape=(), dtype=np.int32),
            "mode": spaces.Discrete(len(MODES)),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: {"mode": "classic" | "time"} overrides the default mode.

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        mode = self._mode
        if options and "mode" in options:
            mode = validate_mode(options["mode"])

        snapshot = self._game.initialize(mode, seed=seed)
        self._steps = 0

        info = self._get_info()
        info["delta_score"] = 0
        info["outcome"] = OUTCOME_IGNORED

        return snapshot.to_obs_dict(), info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: Cell index, or rows * cols for WAIT.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())
        action = int(action)

        score_before = self._game.score
        outcome = OUTCOME_IGNORED

        if action == self._wait_action:
            self._clock.advance(self._clock.interval_ms)
            outcome = "wait"
        elif 0 <= action < self._wait_action:
            r, c = divmod(action, self._config.grid.cols)
            outcome = self._game.select_cell(r, c).outcome

        self._steps += 1
        snapshot = self._game.snapshot()

        terminated = self._game.is_over
        truncated = not terminated and self._steps >= self._config.caps.max_actions

        info = self._get_info()
        info["delta_score"] = self._game.score - score_before
        info["outcome"] = outcome
        if truncated:
            info["terminated_reason"] = "action_cap"

        if self._debug:
            print(f"[DEBUG] Step: action={action}, outcome={outcome}, "
                  f"target={snapshot.target}, sum={snapshot.current_sum}, "
                  f"delta_score={info['delta_score']}")
            if terminated:
                print(f"[DEBUG] TERMINATED: {info['terminated_reason']}")

        return snapshot.to_obs_dict(), 0.0, terminated, truncated, info

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self._game.score,
            "high_score": self._game.high_score,
            "clears": self._game.clears,
            "steps": self._steps,
            "mode": self._game.mode,
            "status": self._game.status,
            "terminated_reason": self._game.termination_reason,
        }

    def action_mask(self) -> np.ndarray:
        """1 for actions that can change state: occupied cells and WAIT."""
        mask = np.zeros(self._config.num_actions, dtype=np.int8)
        mask[:self._wait_action] = (self._game.grid.values_array().reshape(-1) > 0)
        mask[self._wait_action] = 1
        return mask

    def render(self) -> Optional[str]:
        """
        Render the current game state.

        Returns:
            Text board if render_mode is "ansi", None otherwise.
        """
        if self.render_mode == "ansi":
            return self._game.snapshot().to_text()
        return None

    def close(self) -> None:
        """Clean up resources."""
        self._clock.close()

    @property
    def wait_action(self) -> int:
        return self._wait_action

    @property
    def game(self) -> GameEngine:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
