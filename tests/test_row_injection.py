"""
Tests for row injection and the game-over line.
"""

import pytest

from sumgame.sum_core.config_loader import load_config
from sumgame.sum_core.game import GameEngine
from sumgame.sum_core.grid import Grid
from sumgame.sum_core.rng import BlockSource


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def game(config):
    engine = GameEngine(config=config, seed=42)
    engine.initialize("classic")
    return engine


class TestInjectRow:
    """Test the shift-up mechanics."""

    def test_shift_moves_every_row_up(self, game, config):
        before = game.grid.freeze()

        game.inject_row()

        after = game.grid.freeze()
        for r in range(config.grid.rows - 1):
            assert after[r] == before[r + 1]

    def test_bottom_row_is_fresh(self, game, config):
        old_uids = {block.uid for block in game.grid.blocks()}

        game.inject_row()

        bottom = game.grid.freeze()[config.grid.rows - 1]
        assert all(block is not None for block in bottom)
        assert all(1 <= block.value <= 9 for block in bottom)
        assert not {block.uid for block in bottom} & old_uids

    def test_top_row_occupied_ends_game(self, game, config):
        values = [[0] * config.grid.cols for _ in range(config.grid.rows)]
        values[0][5] = 1
        values[9] = [2] * config.grid.cols
        game.load_grid(values)
        before = game.grid.freeze()

        snapshot = game.inject_row()

        assert snapshot.status == "gameover"
        assert game.grid.freeze() == before

    def test_stack_reaches_top(self, game, config):
        """From four starting rows, the seventh injection ends the game."""
        injections = config.grid.rows - config.grid.initial_rows
        for _ in range(injections):
            game.inject_row()
            assert game.is_playing
        assert game.grid.row_occupied(0)

        game.inject_row()
        assert game.is_over

    def test_selection_follows_blocks(self, game):
        game.set_target(40)
        game.select_cell(9, 0)
        block = game.grid.get(9, 0)

        game.inject_row()

        assert game.selection == ((8, 0),)
        assert game.grid.get(8, 0) is block

    def test_inject_ignored_when_idle(self, config):
        engine = GameEngine(config=config, seed=1)
        engine.inject_row()

        assert engine.status == "idle"
        assert engine.grid.occupied_count == 0

    def test_high_score_survives_gameover(self, game, config):
        values = [[0] * config.grid.cols for _ in range(config.grid.rows)]
        values[0][0] = 1
        values[9][0] = 4
        values[9][1] = 6
        game.load_grid(values)
        game.set_target(10)

        # Clear injects a row onto an occupied top row
        game.select_cell(9, 0)
        result = game.select_cell(9, 1)

        assert result.outcome == "cleared"
        assert game.is_over
        assert game.score == 20
        assert game.high_score == 20


class TestGridRows:
    """Test whole-row writes on the grid."""

    @pytest.mark.parametrize("r", [-1, 10, 99])
    def test_set_row_rejects_bad_index(self, config, r):
        grid = Grid(config)
        row = BlockSource(config, seed=1).generate_row()

        with pytest.raises(IndexError):
            grid.set_row(r, row)
        assert grid.occupied_count == 0

    def test_set_row_rejects_bad_length(self, config):
        grid = Grid(config)
        with pytest.raises(ValueError):
            grid.set_row(9, [None] * (config.grid.cols + 1))
