"""
Grid
====

Fixed-size board of numbered blocks. Row 0 is the top (game-over line),
the last row is where new rows enter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from sumgame.sum_core.config_loader import GameConfig, get_config


Coord = Tuple[int, int]


@dataclass(frozen=True)
class Block:
    """A numbered block. uid is unique within one engine."""
    uid: int
    value: int

    def __repr__(self) -> str:
        return f"Block(#{self.uid}={self.value})"


class Grid:
    """
    ROWS x COLS board of Optional[Block].

    Cells are mutated in place; there is no gravity, so clearing a cell
    leaves whatever is above it suspended.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._rows = config.grid.rows
        self._cols = config.grid.cols
        self._cells: List[List[Optional[Block]]] = [
            [None] * self._cols for _ in range(self._rows)
        ]

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def occupied_count(self) -> int:
        """Number of non-empty cells."""
        return sum(1 for _ in self.occupied())

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self._rows and 0 <= c < self._cols

    def get(self, r: int, c: int) -> Optional[Block]:
        """Block at (r, c), or None if empty or out of range."""
        if not self.in_bounds(r, c):
            return None
        return self._cells[r][c]

    def set(self, r: int, c: int, block: Optional[Block]) -> None:
        """Place (or clear, with None) a block at (r, c)."""
        if not self.in_bounds(r, c):
            raise IndexError(f"Cell ({r}, {c}) outside {self._rows}x{self._cols} grid")
        self._cells[r][c] = block

    def clear(self) -> None:
        """Empty every cell."""
        for row in self._cells:
            for c in range(self._cols):
                row[c] = None

    def clear_cells(self, coords: Sequence[Coord]) -> None:
        """Empty the given cells in place."""
        for r, c in coords:
            self._cells[r][c] = None

    def set_row(self, r: int, blocks: Sequence[Optional[Block]]) -> None:
        """Replace row r with the given blocks."""
        if not 0 <= r < self._rows:
            raise IndexError(f"Row {r} outside {self._rows}x{self._cols} grid")
        if len(blocks) != self._cols:
            raise ValueError(f"Row needs {self._cols} cells, got {len(blocks)}")
        self._cells[r] = list(blocks)

    def row_occupied(self, r: int) -> bool:
        """True if any cell in row r holds a block."""
        return any(cell is not None for cell in self._cells[r])

    def shift_up(self, new_bottom: Sequence[Optional[Block]]) -> None:
        """
        Move every row up by one and install new_bottom as the last row.

        The caller must ensure row 0 is empty; its contents are discarded.
        """
        if len(new_bottom) != self._cols:
            raise ValueError(f"Row needs {self._cols} cells, got {len(new_bottom)}")
        for r in range(self._rows - 1):
            self._cells[r] = list(self._cells[r + 1])
        self._cells[self._rows - 1] = list(new_bottom)

    def occupied(self) -> Iterator[Tuple[int, int, Block]]:
        """Iterate (r, c, block) over occupied cells, row-major."""
        for r, row in enumerate(self._cells):
            for c, block in enumerate(row):
                if block is not None:
                    yield r, c, block

    def blocks(self) -> List[Block]:
        """All blocks on the board, row-major."""
        return [block for _, _, block in self.occupied()]

    def sum_of(self, coords: Sequence[Coord]) -> int:
        """Sum of block values at coords; empty cells count as 0."""
        total = 0
        for r, c in coords:
            block = self.get(r, c)
            if block is not None:
                total += block.value
        return total

    def freeze(self) -> Tuple[Tuple[Optional[Block], ...], ...]:
        """Immutable copy of the cells for snapshots."""
        return tuple(tuple(row) for row in self._cells)

    def values_array(self) -> np.ndarray:
        """(rows, cols) int8 array of values, 0 for empty cells."""
        arr = np.zeros((self._rows, self._cols), dtype=np.int8)
        for r, c, block in self.occupied():
            arr[r, c] = block.value
        return arr
