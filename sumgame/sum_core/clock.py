"""
Game Clock
==========

Host-side real-time driver. Owns at most one ActiveTimer and keeps it in
step with the engine: a timer exists only while the engine is playing and
unpaused, and is cancelled on every way out (pause, game over, menu, new
game). A cancelled timer never fires, so callbacks cannot reach a game that
has been replaced.

Usage:
    engine = GameEngine()
    with GameClock(engine) as clock:
        engine.initialize("time")
        clock.advance(3000)  # three heartbeats
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from sumgame.sum_core.game import GameEngine
from sumgame.sum_core.state_snapshot import GameSnapshot


@dataclass
class ActiveTimer:
    """A repeating interval bound to one game generation."""
    interval_ms: int
    callback: Callable[[], object]
    generation: int
    elapsed_ms: float = 0.0
    fired: int = 0
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class GameClock:
    """
    Drives engine.tick() on a fixed cadence.

    Time can be fed explicitly with advance(ms) (deterministic, used by the
    environment and tests) or read from the monotonic clock with pump().
    """

    def __init__(
        self,
        engine: GameEngine,
        time_fn: Callable[[], float] = time.monotonic
    ):
        """
        Attach a clock to an engine.

        Args:
            engine: Engine to drive.
            time_fn: Seconds source for pump(). Defaults to time.monotonic.
        """
        self._engine = engine
        self._time_fn = time_fn
        self._interval_ms = engine.config.timers.tick_interval_ms
        self._timer: Optional[ActiveTimer] = None
        self._last_pump: Optional[float] = None
        self._closed = False
        self._unsubscribe = engine.subscribe(self._reconcile)
        self._reconcile(engine.snapshot())

    @property
    def timer(self) -> Optional[ActiveTimer]:
        """The live timer, or None when the engine is not ticking."""
        return self._timer

    @property
    def active(self) -> bool:
        return self._timer is not None

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def _acquire(self, generation: int) -> ActiveTimer:
        self._release()
        self._timer = ActiveTimer(
            interval_ms=self._interval_ms,
            callback=self._engine.tick,
            generation=generation
        )
        self._last_pump = None
        return self._timer

    def _release(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reconcile(self, snapshot: GameSnapshot) -> None:
        """Acquire or release the timer to match the engine state."""
        if self._closed or not snapshot.is_ticking:
            self._release()
            return
        if self._timer is None or self._timer.generation != snapshot.generation:
            self._acquire(snapshot.generation)

    def advance(self, elapsed_ms: float) -> int:
        """
        Let elapsed_ms of game time pass.

        Args:
            elapsed_ms: Milliseconds to advance.

        Returns:
            Number of heartbeats delivered.
        """
        timer = self._timer
        if timer is None:
            return 0

        fired = 0
        timer.elapsed_ms += elapsed_ms
        while (
            timer is self._timer
            and not timer.cancelled
            and timer.elapsed_ms >= timer.interval_ms
        ):
            timer.elapsed_ms -= timer.interval_ms
            timer.fired += 1
            fired += 1
            timer.callback()
        return fired

    def pump(self) -> int:
        """Advance by the wall time since the previous pump()."""
        now = self._time_fn()
        if self._last_pump is None or self._timer is None:
            self._last_pump = now
            return 0
        elapsed_ms = (now - self._last_pump) * 1000.0
        self._last_pump = now
        return self.advance(elapsed_ms)

    def close(self) -> None:
        """Release the timer and detach from the engine."""
        if self._closed:
            return
        self._closed = True
        self._release()
        self._unsubscribe()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
