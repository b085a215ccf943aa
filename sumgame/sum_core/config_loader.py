"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@dataclass(frozen=True)
class GridConfig:
    """Board dimensions and block values."""
    rows: int           # Row 0 is the top (game-over line)
    cols: int
    initial_rows: int   # Rows filled from the bottom on initialize
    min_value: int      # Smallest block value (inclusive)
    max_value: int      # Largest block value (inclusive)

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols


@dataclass(frozen=True)
class TargetConfig:
    """Target generation parameters."""
    min: int
    max: int
    empty_fallback: int  # Target used when the board is empty
    min_pick: int        # Fewest blocks summed into a target
    max_pick: int        # Most blocks summed into a target

    def clamp(self, value: int) -> int:
        """Clamp a raw sum into the legal target range."""
        return max(self.min, min(value, self.max))


@dataclass(frozen=True)
class TimerConfig:
    """Clock cadence and time-mode arithmetic."""
    tick_interval_ms: int
    time_mode_start: int
    success_bonus: int
    time_cap: int
    timeout_reset: int
    classic_inject_ticks: int


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring parameters."""
    celebration_threshold: int  # Points above which a clear is celebrated


@dataclass(frozen=True)
class CapsConfig:
    """Environment limits."""
    max_actions: int


@dataclass(frozen=True)
class EvaluationConfig:
    """Evaluation harness inputs."""
    seed_bank: str  # Relative paths resolve against the sumgame package

    @property
    def seed_bank_path(self) -> str:
        if os.path.isabs(self.seed_bank):
            return self.seed_bank
        return os.path.join(_PACKAGE_DIR, self.seed_bank)


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    grid: GridConfig
    target: TargetConfig
    timers: TimerConfig
    scoring: ScoringConfig
    caps: CapsConfig
    evaluation: EvaluationConfig

    @property
    def num_actions(self) -> int:
        """One action per cell plus WAIT."""
        return self.grid.cell_count + 1


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    grid = config.grid
    if grid.rows < 1 or grid.cols < 1:
        raise ValueError(f"Grid must be at least 1x1, got {grid.rows}x{grid.cols}")

    if not 0 <= grid.initial_rows <= grid.rows:
        raise ValueError(
            f"initial_rows ({grid.initial_rows}) must be between 0 and rows ({grid.rows})"
        )

    if not 1 <= grid.min_value <= grid.max_value:
        raise ValueError(
            f"Block values need 1 <= min_value <= max_value, "
            f"got [{grid.min_value}, {grid.max_value}]"
        )

    target = config.target
    if target.min > target.max:
        raise ValueError(f"target.min ({target.min}) exceeds target.max ({target.max})")

    if not target.min <= target.empty_fallback <= target.max:
        raise ValueError(
            f"empty_fallback ({target.empty_fallback}) must lie in "
            f"[{target.min}, {target.max}]"
        )

    if not 1 <= target.min_pick <= target.max_pick:
        raise ValueError(
            f"Target pick counts need 1 <= min_pick <= max_pick, "
            f"got [{target.min_pick}, {target.max_pick}]"
        )

    timers = config.timers
    if timers.tick_interval_ms <= 0:
        raise ValueError(f"tick_interval_ms must be positive, got {timers.tick_interval_ms}")

    if timers.classic_inject_ticks <= 0:
        raise ValueError(
            f"classic_inject_ticks must be positive, got {timers.classic_inject_ticks}"
        )

    if timers.time_cap < timers.time_mode_start:
        raise ValueError(
            f"time_cap ({timers.time_cap}) must be >= time_mode_start ({timers.time_mode_start})"
        )

    if config.caps.max_actions <= 0:
        raise ValueError(f"max_actions must be positive, got {config.caps.max_actions}")


def default_config_path() -> str:
    """Location of the shipped game_config.yaml."""
    return os.path.join(_PACKAGE_DIR, "game_config.yaml")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = default_config_path()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    grid_data = raw["grid"]
    grid = GridConfig(
        rows=int(grid_data["rows"]),
        cols=int(grid_data["cols"]),
        initial_rows=int(grid_data.get("initial_rows", 4)),
        min_value=int(grid_data.get("min_value", 1)),
        max_value=int(grid_data.get("max_value", 9))
    )

    target_data = raw["target"]
    target = TargetConfig(
        min=int(target_data["min"]),
        max=int(target_data["max"]),
        empty_fallback=int(target_data.get("empty_fallback", 10)),
        min_pick=int(target_data.get("min_pick", 2)),
        max_pick=int(target_data.get("max_pick", 4))
    )

    timers_data = raw["timers"]
    timers = TimerConfig(
        tick_interval_ms=int(timers_data.get("tick_interval_ms", 1000)),
        time_mode_start=int(timers_data["time_mode_start"]),
        success_bonus=int(timers_data["success_bonus"]),
        time_cap=int(timers_data["time_cap"]),
        timeout_reset=int(timers_data["timeout_reset"]),
        classic_inject_ticks=int(timers_data["classic_inject_ticks"])
    )

    scoring_data = raw.get("scoring", {})
    scoring = ScoringConfig(
        celebration_threshold=int(scoring_data.get("celebration_threshold", 50))
    )

    caps_data = raw.get("caps", {})
    caps = CapsConfig(
        max_actions=int(caps_data.get("max_actions", 2000))
    )

    evaluation_data = raw.get("evaluation", {})
    evaluation = EvaluationConfig(
        seed_bank=str(evaluation_data.get("seed_bank", "evaluation/seed_bank.json"))
    )

    config = GameConfig(
        grid=grid,
        target=target,
        timers=timers,
        scoring=scoring,
        caps=caps,
        evaluation=evaluation
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
