"""
RNG - Seeded Block Source
=========================

Single source of randomness for the game: block values, block uids and the
random picks behind target generation. Equal seeds produce equal games.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar

from sumgame.sum_core.config_loader import GameConfig, get_config
from sumgame.sum_core.grid import Block

T = TypeVar("T")


class BlockSource:
    """
    Produces fresh blocks and rows from a seeded random.Random.

    uids count up for the lifetime of the source and are never reset,
    so blocks stay unique across games played on the same engine.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize block source.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._rng = random.Random(seed)
        self._next_uid: int = 1

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    @property
    def blocks_created(self) -> int:
        """Total blocks produced so far."""
        return self._next_uid - 1

    def random_value(self) -> int:
        """Uniform block value in [min_value, max_value]."""
        grid = self._config.grid
        return self._rng.randint(grid.min_value, grid.max_value)

    def new_block(self) -> Block:
        """A fresh block with a random value and a new uid."""
        return self.make_block(self.random_value())

    def make_block(self, value: int) -> Block:
        """A block with a chosen value and a new uid. Draws no randomness."""
        block = Block(uid=self._next_uid, value=value)
        self._next_uid += 1
        return block

    def generate_row(self) -> List[Block]:
        """A full row of fresh blocks."""
        return [self.new_block() for _ in range(self._config.grid.cols)]

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high]."""
        return self._rng.randint(low, high)

    def sample(self, population: Sequence[T], k: int) -> List[T]:
        """k distinct items drawn uniformly without replacement."""
        return self._rng.sample(list(population), k)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Re-seed the source.

        Args:
            seed: New random seed. Keeps the stream going if None.
        """
        if seed is not None:
            self._seed = seed
            self._rng = random.Random(seed)
