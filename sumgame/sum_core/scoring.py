"""
Scoring System
==============

Awards points for successful clears and tracks the in-memory high score.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sumgame.sum_core.config_loader import GameConfig, get_config


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    target: int
    blocks_cleared: int
    celebrate: bool = False  # Presentation hint for big clears

    def __repr__(self) -> str:
        return f"ScoreEvent({self.target}x{self.blocks_cleared}={self.points})"


class ScoreTracker:
    """
    Tracks game score and high score.

    A clear is worth target * blocks_cleared. The high score survives
    reset() and only ever grows.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._score: int = 0
        self._high_score: int = 0
        self._clears: int = 0

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def high_score(self) -> int:
        """Best score seen by this tracker."""
        return self._high_score

    @property
    def clears(self) -> int:
        """Successful clears this game."""
        return self._clears

    def get_clear_score(self, target: int, blocks_cleared: int) -> int:
        """Points for clearing blocks_cleared blocks against target."""
        return target * blocks_cleared

    def apply_clear(self, target: int, blocks_cleared: int) -> ScoreEvent:
        """
        Apply score for a clear and return the event.

        Args:
            target: Target the selection matched.
            blocks_cleared: Number of blocks in the selection.

        Returns:
            ScoreEvent describing the points awarded.
        """
        points = self.get_clear_score(target, blocks_cleared)
        self._score += points
        self._high_score = max(self._high_score, self._score)
        self._clears += 1
        return ScoreEvent(
            points=points,
            target=target,
            blocks_cleared=blocks_cleared,
            celebrate=points > self._config.scoring.celebration_threshold
        )

    def reset(self) -> None:
        """Reset score to zero. High score is kept."""
        self._score = 0
        self._clears = 0
