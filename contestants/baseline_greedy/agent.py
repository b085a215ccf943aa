"""
Baseline Greedy Agent - Clears the biggest exact combination it can find.

Strategy:
- With an empty selection, look for a combination of up to MAX_PICK block
  values that adds up to the target, trying larger combinations first
  (a clear is worth target * blocks).
- Search over value counts (at most 9 distinct values), not over cells, so
  each decision is cheap even on a full board.
- Map each chosen value to the topmost free cell holding it, to keep the
  danger row clear.
- Select the planned cells one per step. If nothing fits, WAIT.

This serves as a working example of reading observations and a baseline
benchmark for teams to compare against.
"""

from itertools import combinations_with_replacement
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


MAX_PICK = 4
MAX_VALUE = 9


def find_value_combo(
    counts: Dict[int, int],
    remaining: int,
    max_pick: int = MAX_PICK
) -> Optional[Tuple[int, ...]]:
    """
    Largest multiset of available values summing to remaining.

    Args:
        counts: value -> number of free blocks with that value.
        remaining: Sum still needed.
        max_pick: Most blocks to combine.

    Returns:
        Tuple of values, or None if no combination exists.
    """
    values = sorted(v for v, n in counts.items() if n > 0)
    for k in range(max_pick, 0, -1):
        for combo in combinations_with_replacement(values, k):
            if sum(combo) != remaining:
                continue
            if all(combo.count(v) <= counts[v] for v in set(combo)):
                return combo
    return None


class SumAgent:
    """
    Greedy baseline agent.

    Plans a full clear from an empty selection, then executes it one cell
    per step.
    """

    def __init__(self, debug: bool = False):
        """
        Initialize the agent.

        Args:
            debug: If True, print decisions to stdout.
        """
        self.debug = debug
        self._plan: List[Tuple[int, int]] = []

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset agent state for a new episode."""
        self._plan = []

    def _plan_clear(self, grid: np.ndarray, target: int) -> List[Tuple[int, int]]:
        counts: Dict[int, int] = {}
        cells_by_value: Dict[int, List[Tuple[int, int]]] = {}
        for r, c in zip(*np.nonzero(grid)):
            value = int(grid[r, c])
            counts[value] = counts.get(value, 0) + 1
            cells_by_value.setdefault(value, []).append((int(r), int(c)))

        combo = find_value_combo(counts, target)
        if combo is None:
            return []

        plan = []
        for value in combo:
            # np.nonzero is row-major, so the first free cell is the topmost
            plan.append(cells_by_value[value].pop(0))
        return plan

    def act(self, observation: Dict[str, Any], debug: bool = False) -> int:
        """
        Choose the next cell to select, or WAIT.

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            Action index (rows * cols is WAIT).
        """
        grid = observation["grid"]
        selected = observation["selected"]
        target = int(observation["target"])
        rows, cols = grid.shape
        wait_action = rows * cols

        if not selected.any():
            self._plan = self._plan_clear(grid, target)
        elif not self._plan:
            # Selection we did not plan; drop one cell at a time
            r, c = np.argwhere(selected)[0]
            return int(r) * cols + int(c)

        if not self._plan:
            if debug or self.debug:
                print(f"[Greedy Agent] No combination for target={target}, waiting")
            return wait_action

        r, c = self._plan.pop(0)
        if debug or self.debug:
            print(f"[Greedy Agent] Target={target}, select ({r}, {c})={int(grid[r, c])}, "
                  f"{len(self._plan)} left in plan")
        return r * cols + c


# Convenience function to create agent (used by evaluation harness)
def create_agent(**kwargs) -> SumAgent:
    """Factory function to create an agent instance."""
    return SumAgent(**kwargs)
