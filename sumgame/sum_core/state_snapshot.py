"""
State Snapshot
==============

Immutable view of the game state handed to renderers and agents after every
mutation, plus packing into numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from sumgame.sum_core.grid import Block, Coord

# Game status
STATUS_IDLE = "idle"
STATUS_PLAYING = "playing"
STATUS_GAMEOVER = "gameover"
STATUSES = (STATUS_IDLE, STATUS_PLAYING, STATUS_GAMEOVER)

# Game modes
MODE_CLASSIC = "classic"
MODE_TIME = "time"
MODES = (MODE_CLASSIC, MODE_TIME)


def validate_mode(mode: str) -> str:
    """Return mode unchanged, or raise ValueError for an unknown mode."""
    if mode not in MODES:
        raise ValueError(f"mode must be one of {MODES}, got '{mode}'")
    return mode


@dataclass(frozen=True)
class GameSnapshot:
    """
    Complete game state at one instant.

    The grid is a tuple of rows of Optional[Block]; nothing in a snapshot
    aliases engine state.
    """
    status: str
    mode: str
    grid: Tuple[Tuple[Optional[Block], ...], ...]
    selection: Tuple[Coord, ...]
    target: int
    score: int
    time_left: int
    paused: bool
    high_score: int

    # Derived
    current_sum: int = 0
    next_row_in: int = 0     # Heartbeats until the next forced row (time_left in time mode)
    generation: int = 0      # Incremented on every initialize

    @property
    def rows(self) -> int:
        return len(self.grid)

    @property
    def cols(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    @property
    def is_playing(self) -> bool:
        return self.status == STATUS_PLAYING

    @property
    def is_over(self) -> bool:
        return self.status == STATUS_GAMEOVER

    @property
    def is_ticking(self) -> bool:
        """True when a real-time clock should be driving this game."""
        return self.status == STATUS_PLAYING and not self.paused

    @property
    def occupied_count(self) -> int:
        return sum(1 for row in self.grid for cell in row if cell is not None)

    def cell(self, r: int, c: int) -> Optional[Block]:
        return self.grid[r][c]

    def is_selected(self, r: int, c: int) -> bool:
        return (r, c) in self.selection

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        values = np.zeros((self.rows, self.cols), dtype=np.int8)
        selected = np.zeros((self.rows, self.cols), dtype=np.int8)
        for r, row in enumerate(self.grid):
            for c, block in enumerate(row):
                if block is not None:
                    values[r, c] = block.value
        for r, c in self.selection:
            selected[r, c] = 1

        return {
            "grid": values,
            "selected": selected,
            "target": np.array(self.target, dtype=np.int32),
            "current_sum": np.array(self.current_sum, dtype=np.int32),
            "score": np.array(self.score, dtype=np.int64),
            "time_left": np.array(self.time_left, dtype=np.int32),
            "next_row_in": np.array(self.next_row_in, dtype=np.int32),
            "occupied_count": np.array(int(np.count_nonzero(values)), dtype=np.int32),
            "mode": np.array(MODES.index(self.mode), dtype=np.int32),
        }

    def to_text(self) -> str:
        """Plain-text board dump for debugging."""
        lines = [
            f"[{self.status}{' paused' if self.paused else ''}] mode={self.mode} "
            f"target={self.target} sum={self.current_sum} score={self.score} "
            f"best={self.high_score} time={self.time_left}"
        ]
        for r, row in enumerate(self.grid):
            cells = []
            for c, block in enumerate(row):
                if block is None:
                    cells.append(" . ")
                elif (r, c) in self.selection:
                    cells.append(f"[{block.value}]")
                else:
                    cells.append(f" {block.value} ")
            lines.append("".join(cells))
        return "\n".join(lines)
