"""
Core Game
=========

Game engine combining the grid, block source, scoring and rules. Owns all
mutable game state; renderers and agents only see snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from sumgame.sum_core.config_loader import GameConfig, get_config
from sumgame.sum_core.grid import Block, Coord, Grid
from sumgame.sum_core.rng import BlockSource
from sumgame.sum_core.rules import (
    GameRules,
    OUTCOME_CLEARED,
    OUTCOME_IGNORED,
    OUTCOME_OVERSHOT,
    OUTCOME_PENDING,
)
from sumgame.sum_core.scoring import ScoreEvent, ScoreTracker
from sumgame.sum_core.state_snapshot import (
    GameSnapshot,
    MODE_CLASSIC,
    MODE_TIME,
    STATUS_GAMEOVER,
    STATUS_IDLE,
    STATUS_PLAYING,
    validate_mode,
)

SnapshotListener = Callable[[GameSnapshot], None]
CelebrationListener = Callable[[ScoreEvent], None]


@dataclass
class SelectResult:
    """Result of a single select_cell intent."""
    outcome: str
    current_sum: int
    points: int
    event: Optional[ScoreEvent]
    snapshot: GameSnapshot


class GameEngine:
    """
    Main game state machine.

    idle --initialize--> playing --(row injected onto occupied top row)--> gameover
    playing/gameover --return_to_menu--> idle

    Every intent is a silent no-op when it does not apply (wrong status,
    paused, empty or out-of-range cell). Listeners receive a snapshot after
    each mutation.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize engine in the idle state.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
        """
        if config is None:
            config = get_config()

        self._config = config

        # Subsystems
        self._source = BlockSource(config, seed)
        self._grid = Grid(config)
        self._scorer = ScoreTracker(config)
        self._rules = GameRules(self._source, config)

        # Game state
        self._status: str = STATUS_IDLE
        self._mode: str = MODE_CLASSIC
        self._selection: List[Coord] = []
        self._target: int = config.target.empty_fallback
        self._time_left: int = 0
        self._paused: bool = False
        self._classic_ticks: int = 0
        self._generation: int = 0
        self._termination_reason: str = ""

        self._listeners: List[SnapshotListener] = []
        self._celebration_listeners: List[CelebrationListener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def grid(self) -> Grid:
        """Live grid. Mutate only through engine intents (or in tests)."""
        return self._grid

    @property
    def status(self) -> str:
        return self._status

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def selection(self) -> tuple:
        return tuple(self._selection)

    @property
    def target(self) -> int:
        return self._target

    @property
    def score(self) -> int:
        return self._scorer.score

    @property
    def high_score(self) -> int:
        return self._scorer.high_score

    @property
    def time_left(self) -> int:
        return self._time_left

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def is_playing(self) -> bool:
        return self._status == STATUS_PLAYING

    @property
    def is_over(self) -> bool:
        return self._status == STATUS_GAMEOVER

    @property
    def generation(self) -> int:
        """Incremented on every initialize; identifies one game."""
        return self._generation

    @property
    def termination_reason(self) -> str:
        return self._termination_reason

    @property
    def current_sum(self) -> int:
        return self._grid.sum_of(self._selection)

    @property
    def next_row_in(self) -> int:
        """Heartbeats until the clock forces the next row."""
        if self._mode == MODE_TIME:
            return self._time_left
        return self._rules.timers.classic_inject_ticks - self._classic_ticks

    @property
    def clears(self) -> int:
        return self._scorer.clears

    def snapshot(self) -> GameSnapshot:
        """Build current game state snapshot."""
        return GameSnapshot(
            status=self._status,
            mode=self._mode,
            grid=self._grid.freeze(),
            selection=tuple(self._selection),
            target=self._target,
            score=self._scorer.score,
            time_left=self._time_left,
            paused=self._paused,
            high_score=self._scorer.high_score,
            current_sum=self.current_sum,
            next_row_in=self.next_row_in,
            generation=self._generation
        )

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """
        Register a snapshot listener.

        Returns:
            Callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def on_celebrate(self, listener: CelebrationListener) -> Callable[[], None]:
        """Register a listener for clears worth celebrating."""
        self._celebration_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._celebration_listeners:
                self._celebration_listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> GameSnapshot:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def initialize(self, mode: str = MODE_CLASSIC, seed: Optional[int] = None) -> GameSnapshot:
        """
        Start a new game.

        Args:
            mode: "classic" or "time".
            seed: New random seed. Continues the current stream if None.

        Returns:
            Initial game snapshot.
        """
        mode = validate_mode(mode)
        self._source.reset(seed)

        self._grid.clear()
        grid_cfg = self._config.grid
        for i in range(grid_cfg.initial_rows):
            self._grid.set_row(grid_cfg.rows - 1 - i, self._source.generate_row())

        self._scorer.reset()
        self._mode = mode
        self._status = STATUS_PLAYING
        self._selection = []
        self._target = self.generate_target(self._grid)
        self._time_left = self._rules.timers.starting_time(mode)
        self._paused = False
        self._classic_ticks = 0
        self._termination_reason = ""
        self._generation += 1

        return self._emit()

    def generate_target(self, grid: Optional[Grid] = None) -> int:
        """Generate a target from grid (the live grid if None)."""
        return self._rules.target.generate(grid if grid is not None else self._grid)

    def select_cell(self, r: int, c: int) -> SelectResult:
        """
        Toggle (r, c) in the selection and resolve the running sum.

        Args:
            r: Row index, 0 at the top.
            c: Column index.

        Returns:
            SelectResult; outcome is "ignored" when the intent did nothing.
        """
        if not self.is_playing or self._paused or self._grid.get(r, c) is None:
            return SelectResult(
                outcome=OUTCOME_IGNORED,
                current_sum=self.current_sum,
                points=0,
                event=None,
                snapshot=self.snapshot()
            )

        coord = (r, c)
        if coord in self._selection:
            self._selection.remove(coord)
        else:
            self._selection.append(coord)

        current_sum = self.current_sum
        outcome = self._rules.selection.evaluate(current_sum, self._target)

        event = None
        if outcome == OUTCOME_CLEARED:
            event = self._resolve_success(list(self._selection))
        elif outcome == OUTCOME_OVERSHOT:
            self._selection = []

        return SelectResult(
            outcome=outcome,
            current_sum=current_sum,
            points=event.points if event is not None else 0,
            event=event,
            snapshot=self._emit()
        )

    def resolve_success(self, coords: Sequence[Coord]) -> Optional[ScoreEvent]:
        """
        Score and clear coords as a successful selection.

        Normally reached through select_cell; exposed for tools and tests.
        Empty, duplicate and out-of-range coords are dropped.

        Returns:
            ScoreEvent, or None when ignored (not playing, paused, or no
            occupied cell left to clear).
        """
        if not self.is_playing or self._paused:
            return None

        cells: List[Coord] = []
        for r, c in coords:
            coord = (int(r), int(c))
            if coord not in cells and self._grid.get(*coord) is not None:
                cells.append(coord)
        if not cells:
            return None

        event = self._resolve_success(cells)
        self._emit()
        return event

    def _resolve_success(self, coords: List[Coord]) -> ScoreEvent:
        event = self._scorer.apply_clear(self._target, len(coords))

        # No gravity: cells above stay where they are
        self._grid.clear_cells(coords)
        self._selection = []
        self._target = self.generate_target(self._grid)

        if self._mode == MODE_CLASSIC:
            self._inject_row()
        else:
            self._time_left = self._rules.timers.after_success(self._time_left)

        if event.celebrate:
            for listener in list(self._celebration_listeners):
                listener(event)

        return event

    def inject_row(self) -> GameSnapshot:
        """
        Push a fresh row in from the bottom, or end the game if row 0 is
        occupied. No-op unless playing.
        """
        if self.is_playing:
            self._inject_row()
        return self._emit()

    def _inject_row(self) -> bool:
        result = self._rules.termination.check_injection(self._grid)
        if result.terminated:
            self._status = STATUS_GAMEOVER
            self._termination_reason = result.reason
            self._selection = []
            return False

        self._grid.shift_up(self._source.generate_row())
        # Row 0 was empty, so every selected cell has a row above it
        self._selection = [(r - 1, c) for r, c in self._selection]
        return True

    def tick(self) -> GameSnapshot:
        """
        One clock heartbeat.

        Time mode counts the clock down and injects a penalty row on timeout.
        Classic mode injects a row every classic_inject_ticks heartbeats.
        """
        if not self.is_playing or self._paused:
            return self.snapshot()

        timers = self._rules.timers
        if self._mode == MODE_TIME:
            if timers.is_timeout(self._time_left):
                self._inject_row()
                if self.is_playing:
                    self._time_left = timers.timeout_reset
            else:
                self._time_left -= 1
        else:
            self._classic_ticks += 1
            if self._classic_ticks >= timers.classic_inject_ticks:
                self._classic_ticks = 0
                self._inject_row()

        return self._emit()

    def pause(self) -> GameSnapshot:
        """Suspend input and timers. No-op unless playing."""
        if self.is_playing and not self._paused:
            self._paused = True
            return self._emit()
        return self.snapshot()

    def resume(self) -> GameSnapshot:
        """Resume after pause; the classic row cadence restarts."""
        if self.is_playing and self._paused:
            self._paused = False
            self._classic_ticks = 0
            return self._emit()
        return self.snapshot()

    def toggle_pause(self) -> GameSnapshot:
        return self.resume() if self._paused else self.pause()

    def return_to_menu(self) -> GameSnapshot:
        """Leave the current game. High score is kept."""
        self._status = STATUS_IDLE
        self._selection = []
        self._paused = False
        return self._emit()

    # ------------------------------------------------------------------
    # Setup helpers (tools and tests)
    # ------------------------------------------------------------------

    def load_grid(self, values: Sequence[Sequence[int]]) -> None:
        """
        Replace the board with the given values.

        Args:
            values: rows x cols ints; 0 or None marks an empty cell.
        """
        grid_cfg = self._config.grid
        if len(values) != grid_cfg.rows:
            raise ValueError(f"Expected {grid_cfg.rows} rows, got {len(values)}")

        self._grid.clear()
        for r, row in enumerate(values):
            blocks: List[Optional[Block]] = []
            for value in row:
                blocks.append(self._source.make_block(int(value)) if value else None)
            self._grid.set_row(r, blocks)
        self._selection = []

    def set_target(self, value: int) -> None:
        """Force the target, clamped to the legal range."""
        self._target = self._config.target.clamp(int(value))

    def set_time_left(self, value: int) -> None:
        self._time_left = int(value)
