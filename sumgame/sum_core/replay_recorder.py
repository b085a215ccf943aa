"""
Replay Recorder
===============

A simple wrapper to record Gymnasium environment episodes for replay.

Usage:
    from sumgame.sum_core import SumGameEnv, ReplayRecorder

    env = SumGameEnv()
    recorder = ReplayRecorder(env)

    obs, info = recorder.reset(seed=42)

    done = False
    while not done:
        action = your_agent(obs)
        obs, reward, terminated, truncated, info = recorder.step(action)
        done = terminated or truncated

    recorder.save("my_replay.json")

Because the game is fully determined by its seed and the action list, a saved
replay can be re-run with replay_actions() to verify the final score.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import gymnasium as gym
import numpy as np

from sumgame.sum_core.config_loader import GameConfig, load_config


def generate_replay_filename(
    agent_name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """
    Generate a timestamped replay filename.

    Format: {agent_name}_{YYYYMMDD_HHMMSS}_s{seed}.json
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if seed is not None:
        filename = f"{agent_name}_{timestamp}_s{seed}.json"
    else:
        filename = f"{agent_name}_{timestamp}.json"

    if directory:
        return Path(directory) / filename
    return Path(filename)


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Hash every config value that affects gameplay, for replay validation."""
    if config is None:
        config = load_config()
    hash_data = {
        "grid": {
            "rows": config.grid.rows,
            "cols": config.grid.cols,
            "initial_rows": config.grid.initial_rows,
            "min_value": config.grid.min_value,
            "max_value": config.grid.max_value,
        },
        "target": {
            "min": config.target.min,
            "max": config.target.max,
            "empty_fallback": config.target.empty_fallback,
            "min_pick": config.target.min_pick,
            "max_pick": config.target.max_pick,
        },
        "timers": {
            "tick_interval_ms": config.timers.tick_interval_ms,
            "time_mode_start": config.timers.time_mode_start,
            "success_bonus": config.timers.success_bonus,
            "time_cap": config.timers.time_cap,
            "timeout_reset": config.timers.timeout_reset,
            "classic_inject_ticks": config.timers.classic_inject_ticks,
        },
    }
    return hashlib.md5(json.dumps(hash_data, sort_keys=True).encode()).hexdigest()[:8]


class ReplayRecorder:
    """
    Wrapper that records environment interactions for replay.

    Wraps a SumGameEnv and records all actions, scores, and metadata.

    Attributes:
        env: The wrapped Gymnasium environment.
        recording: Whether currently recording.
    """

    def __init__(
        self,
        env: gym.Env,
        agent_name: str = "unknown",
        auto_save_path: Optional[str] = None,
        verbose: bool = True
    ):
        """
        Initialize the replay recorder.

        Args:
            env: The Gymnasium environment to wrap.
            agent_name: Name of the agent (stored in replay metadata).
            auto_save_path: If provided, automatically save replay on episode end.
            verbose: If True, print a summary when saving.
        """
        self.env = env
        self.agent_name = agent_name
        self.auto_save_path = auto_save_path
        self.verbose = verbose

        self._recording = False
        self._seed: Optional[int] = None
        self._mode: str = ""
        self._actions: List[int] = []
        self._scores: List[int] = []
        self._termination_reason: str = ""
        self._config_hash = compute_config_hash(getattr(env, "config", None))

    @property
    def recording(self) -> bool:
        """Whether currently recording."""
        return self._recording

    @property
    def observation_space(self):
        """Forward observation space from wrapped env."""
        return self.env.observation_space

    @property
    def action_space(self):
        """Forward action space from wrapped env."""
        return self.env.action_space

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict] = None
    ) -> Tuple[Any, Dict]:
        """
        Reset the environment and start recording.

        Args:
            seed: Random seed for the episode. A fresh one is drawn and
                recorded if None.
            options: Additional reset options (e.g. {"mode": "time"}).

        Returns:
            Initial observation and info dict.
        """
        self._actions = []
        self._scores = []
        self._termination_reason = ""
        if seed is None:
            # Replays need a concrete seed to re-run the same board
            seed = int(np.random.SeedSequence().entropy % 2**31)
        self._seed = seed
        self._recording = True

        obs, info = self.env.reset(seed=seed, options=options)
        self._mode = info.get("mode", "")

        return obs, info

    def step(self, action: Union[int, np.ndarray]) -> Tuple[Any, float, bool, bool, Dict]:
        """
        Take a step and record it.

        Args:
            action: The action to take.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        if isinstance(action, np.ndarray):
            action_val = int(action.item())
        else:
            action_val = int(action)

        obs, reward, terminated, truncated, info = self.env.step(action_val)

        if self._recording:
            self._actions.append(action_val)
            self._scores.append(int(info.get("score", 0)))

            if terminated or truncated:
                self._termination_reason = info.get("terminated_reason", "unknown")

        if (terminated or truncated) and self.auto_save_path:
            self.save(self.auto_save_path)

        return obs, reward, terminated, truncated, info

    def get_replay_data(self) -> Dict[str, Any]:
        """
        Get the current replay data as a dictionary.

        Returns:
            Dictionary containing all replay data.
        """
        return {
            "seed": self._seed,
            "mode": self._mode,
            "agent": self.agent_name,
            "config_hash": self._config_hash,
            "actions": self._actions.copy(),
            "scores": self._scores.copy(),
            "final_score": self._scores[-1] if self._scores else 0,
            "total_steps": len(self._actions),
            "termination_reason": self._termination_reason,
        }

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Save the replay to a JSON file.

        Args:
            path: Path to save the replay. If None, auto-generates a timestamped name.
            overwrite: If True, overwrite existing file.
            directory: Directory for auto-generated filename (only used if path is None).

        Returns:
            Path where the replay was saved.
        """
        if path is None:
            path = generate_replay_filename(
                agent_name=self.agent_name,
                seed=self._seed,
                directory=directory
            )
        else:
            path = Path(path)

        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)

        replay_data = self.get_replay_data()

        with open(path, "w") as f:
            json.dump(replay_data, f, indent=2)

        if self.verbose:
            print(f"Replay saved: {path}")
            print(f"  Seed: {self._seed}")
            print(f"  Steps: {len(self._actions)}")
            print(f"  Final score: {replay_data['final_score']}")

        return path

    def close(self) -> None:
        """Close the wrapped environment."""
        self.env.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def load_replay(path: Union[str, Path]) -> Dict[str, Any]:
    """Load replay data saved by ReplayRecorder.save()."""
    with open(path, "r") as f:
        return json.load(f)


def replay_actions(replay: Dict[str, Any], env: Optional[gym.Env] = None) -> int:
    """
    Re-run a recorded episode and return its final score.

    Args:
        replay: Replay data (from get_replay_data() or load_replay()).
        env: Environment to replay in. A fresh SumGameEnv if None.

    Returns:
        Final score reached by the replayed actions.

    Raises:
        ValueError: If the replay has no seed or was recorded under a
            different config.
    """
    from sumgame.sum_core.env_gym import SumGameEnv

    if replay.get("seed") is None:
        raise ValueError("Replay has no seed; the board cannot be reproduced")

    own_env = env is None
    if env is None:
        env = SumGameEnv()

    try:
        current_hash = compute_config_hash(getattr(env, "config", None))
        if replay.get("config_hash") and replay["config_hash"] != current_hash:
            raise ValueError(
                f"Replay config hash {replay['config_hash']} does not match "
                f"current config {current_hash}"
            )

        options = {"mode": replay["mode"]} if replay.get("mode") else None
        _, info = env.reset(seed=replay.get("seed"), options=options)
        score = int(info.get("score", 0))
        for action in replay["actions"]:
            _, _, terminated, truncated, info = env.step(int(action))
            score = int(info.get("score", 0))
            if terminated or truncated:
                break
        return score
    finally:
        if own_env:
            env.close()


def record_episode(
    env: gym.Env,
    agent_fn,
    seed: int,
    save_path: Optional[str] = None,
    agent_name: str = "unknown",
    options: Optional[Dict] = None
) -> Dict[str, Any]:
    """
    Convenience function to record a single episode.

    Args:
        env: The Gymnasium environment.
        agent_fn: Function that takes observation and returns action.
        seed: Random seed for the episode.
        save_path: If provided, save replay to this path.
        agent_name: Name of the agent.
        options: Reset options (e.g. {"mode": "time"}).

    Returns:
        Replay data dictionary.
    """
    recorder = ReplayRecorder(env, agent_name=agent_name)

    obs, info = recorder.reset(seed=seed, options=options)

    done = False
    while not done:
        action = agent_fn(obs)
        obs, reward, terminated, truncated, info = recorder.step(action)
        done = terminated or truncated

    replay_data = recorder.get_replay_data()

    if save_path:
        recorder.save(save_path)

    return replay_data
