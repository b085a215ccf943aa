"""
Tests for configuration loading and validation.
"""

import os
from dataclasses import FrozenInstanceError

import pytest
import yaml

from sumgame.sum_core.config_loader import default_config_path, get_config, load_config


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def raw_config():
    """Default YAML contents as a dict, for writing modified copies."""
    with open(default_config_path(), "r") as f:
        return yaml.safe_load(f)


def _write(tmp_path, data):
    path = tmp_path / "game_config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    return str(path)


class TestDefaultConfig:
    """Test the shipped configuration."""

    def test_grid_dimensions(self, config):
        """Board is 10 rows by 6 columns with 4 starting rows."""
        assert config.grid.rows == 10
        assert config.grid.cols == 6
        assert config.grid.initial_rows == 4
        assert config.grid.cell_count == 60

    def test_block_values(self, config):
        assert config.grid.min_value == 1
        assert config.grid.max_value == 9

    def test_target_bounds(self, config):
        assert config.target.min == 5
        assert config.target.max == 40
        assert config.target.empty_fallback == 10
        assert (config.target.min_pick, config.target.max_pick) == (2, 4)

    def test_timers(self, config):
        timers = config.timers
        assert timers.tick_interval_ms == 1000
        assert timers.time_mode_start == 15
        assert timers.success_bonus == 5
        assert timers.time_cap == 20
        assert timers.timeout_reset == 10
        assert timers.classic_inject_ticks == 15

    def test_num_actions(self, config):
        """One action per cell plus WAIT."""
        assert config.num_actions == 61

    def test_target_clamp(self, config):
        assert config.target.clamp(2) == 5
        assert config.target.clamp(17) == 17
        assert config.target.clamp(55) == 40

    def test_config_is_frozen(self, config):
        with pytest.raises(FrozenInstanceError):
            config.grid.rows = 12

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_seed_bank_resolves_inside_package(self, config):
        path = config.evaluation.seed_bank_path
        assert os.path.isabs(path)
        assert os.path.isfile(path)
        assert path.endswith(os.path.join("evaluation", "seed_bank.json"))

    def test_absolute_seed_bank_kept(self, tmp_path, raw_config):
        target = str(tmp_path / "bank.json")
        raw_config["evaluation"]["seed_bank"] = target
        assert load_config(_write(tmp_path, raw_config)).evaluation.seed_bank_path == target


class TestConfigValidation:
    """Test load-time validation errors."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_round_trip_of_default(self, tmp_path, raw_config, config):
        """A dumped copy of the defaults loads to an equal config."""
        assert load_config(_write(tmp_path, raw_config)) == config

    def test_initial_rows_exceeding_rows(self, tmp_path, raw_config):
        raw_config["grid"]["initial_rows"] = raw_config["grid"]["rows"] + 1
        with pytest.raises(ValueError, match="initial_rows"):
            load_config(_write(tmp_path, raw_config))

    def test_inverted_value_range(self, tmp_path, raw_config):
        raw_config["grid"]["min_value"] = 9
        raw_config["grid"]["max_value"] = 1
        with pytest.raises(ValueError, match="min_value"):
            load_config(_write(tmp_path, raw_config))

    def test_fallback_outside_target_range(self, tmp_path, raw_config):
        raw_config["target"]["empty_fallback"] = 99
        with pytest.raises(ValueError, match="empty_fallback"):
            load_config(_write(tmp_path, raw_config))

    def test_time_cap_below_start(self, tmp_path, raw_config):
        raw_config["timers"]["time_cap"] = 3
        with pytest.raises(ValueError, match="time_cap"):
            load_config(_write(tmp_path, raw_config))

    def test_non_positive_interval(self, tmp_path, raw_config):
        raw_config["timers"]["tick_interval_ms"] = 0
        with pytest.raises(ValueError, match="tick_interval_ms"):
            load_config(_write(tmp_path, raw_config))
