"""
Game Rules
==========

Handles target generation, selection outcomes, timer arithmetic and the
top-row termination check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sumgame.sum_core.config_loader import GameConfig, get_config
from sumgame.sum_core.grid import Grid
from sumgame.sum_core.rng import BlockSource
from sumgame.sum_core.state_snapshot import MODE_TIME

# Selection outcomes
OUTCOME_IGNORED = "ignored"   # Intent had no effect
OUTCOME_PENDING = "pending"   # Sum still below target
OUTCOME_CLEARED = "cleared"   # Sum hit target, blocks removed
OUTCOME_OVERSHOT = "overshot"  # Sum passed target, selection dropped


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, reason)


class TargetRules:
    """
    Picks the next target sum.

    Sums a few random blocks from the board and clamps the result. This is a
    heuristic, not a solver: the target is usually reachable, never promised.
    """

    def __init__(
        self,
        source: BlockSource,
        config: Optional[GameConfig] = None
    ):
        if config is None:
            config = get_config()

        self._config = config
        self._source = source

    def generate(self, grid: Grid) -> int:
        """
        Generate a target from the blocks currently on the grid.

        Args:
            grid: Board to sample from.

        Returns:
            Target in [target.min, target.max].
        """
        target_cfg = self._config.target
        blocks = grid.blocks()
        if not blocks:
            return target_cfg.empty_fallback

        count = min(
            len(blocks),
            self._source.randint(target_cfg.min_pick, target_cfg.max_pick)
        )
        picked = self._source.sample(blocks, count)
        return target_cfg.clamp(sum(block.value for block in picked))


class SelectionRules:
    """Maps a running selection sum to an outcome."""

    @staticmethod
    def evaluate(current_sum: int, target: int) -> str:
        if current_sum == target:
            return OUTCOME_CLEARED
        if current_sum > target:
            return OUTCOME_OVERSHOT
        return OUTCOME_PENDING


class TimerRules:
    """
    Time-mode clock arithmetic and the classic-mode row cadence.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._timers = config.timers

    @property
    def classic_inject_ticks(self) -> int:
        return self._timers.classic_inject_ticks

    def starting_time(self, mode: str) -> int:
        """Clock value for a new game (0 outside time mode)."""
        return self._timers.time_mode_start if mode == MODE_TIME else 0

    def after_success(self, time_left: int) -> int:
        """Bonus time for a clear, capped."""
        return min(time_left + self._timers.success_bonus, self._timers.time_cap)

    def is_timeout(self, time_left: int) -> bool:
        """True when the next tick would take the clock below 1."""
        return time_left <= 1

    @property
    def timeout_reset(self) -> int:
        return self._timers.timeout_reset


class TerminationRules:
    """
    Handles game termination.

    The only way to lose is a row injection while the top row holds a block.
    """

    REASON_TOP_REACHED = "top_reached"

    def check_injection(self, grid: Grid) -> TerminationResult:
        """
        Check whether a row can be injected.

        Args:
            grid: Current board.

        Returns:
            game_over if row 0 is occupied, none otherwise.
        """
        if grid.row_occupied(0):
            return TerminationResult.game_over(self.REASON_TOP_REACHED)
        return TerminationResult.none()


class GameRules:
    """
    Combined interface for all game rules.
    """

    def __init__(
        self,
        source: BlockSource,
        config: Optional[GameConfig] = None
    ):
        if config is None:
            config = get_config()

        self._config = config
        self.target = TargetRules(source, config)
        self.selection = SelectionRules()
        self.timers = TimerRules(config)
        self.termination = TerminationRules()
