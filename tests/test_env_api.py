"""
Tests for Gymnasium environment API.
"""

import pytest
import numpy as np
import yaml

from sumgame.sum_core.config_loader import default_config_path, load_config
from sumgame.sum_core.env_gym import SumGameEnv


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def env():
    env = SumGameEnv()
    yield env
    env.close()


def _empty_board(config):
    return [[0] * config.grid.cols for _ in range(config.grid.rows)]


class TestSumGameEnv:
    """Test single environment API."""

    def test_reset_returns_obs_and_info(self, env):
        """Reset should return (observation, info) tuple."""
        result = env.reset(seed=42)

        assert isinstance(result, tuple)
        assert len(result) == 2

        obs, info = result
        assert isinstance(obs, dict)
        assert isinstance(info, dict)

    def test_observation_structure(self, env, config):
        """Observation should have expected keys, shapes and dtypes."""
        obs, _ = env.reset(seed=42)
        shape = (config.grid.rows, config.grid.cols)

        assert obs["grid"].shape == shape
        assert obs["grid"].dtype == np.int8
        assert obs["selected"].shape == shape
        assert not obs["selected"].any()

        for key in ("target", "current_sum", "time_left", "next_row_in", "occupied_count", "mode"):
            assert obs[key].shape == ()
            assert obs[key].dtype == np.int32
        assert obs["score"].dtype == np.int64

    def test_observation_in_space(self, env):
        obs, _ = env.reset(seed=42)
        assert env.observation_space.contains(obs)

        for _ in range(50):
            obs, _, terminated, truncated, _ = env.step(env.action_space.sample())
            assert env.observation_space.contains(obs)
            if terminated or truncated:
                break

    def test_initial_board(self, env, config):
        obs, info = env.reset(seed=42)

        assert int(obs["occupied_count"]) == config.grid.initial_rows * config.grid.cols
        assert not obs["grid"][: config.grid.rows - config.grid.initial_rows].any()
        assert 5 <= int(obs["target"]) <= 40
        assert int(obs["next_row_in"]) == 15
        assert info["score"] == 0
        assert info["delta_score"] == 0
        assert info["mode"] == "classic"
        assert info["status"] == "playing"

    def test_action_space(self, env, config):
        assert env.action_space.n == config.grid.cell_count + 1
        assert env.wait_action == config.grid.cell_count

    def test_step_returns_five_tuple(self, env):
        """Step should return (obs, reward, terminated, truncated, info)."""
        env.reset(seed=42)
        result = env.step(env.wait_action)

        assert len(result) == 5
        obs, reward, terminated, truncated, info = result
        assert isinstance(obs, dict)
        assert reward == 0.0
        assert isinstance(terminated, bool)
        assert isinstance(truncated, bool)

    def test_select_cell(self, env, config):
        obs, _ = env.reset(seed=42)
        env.game.set_target(40)
        action = (config.grid.rows - 1) * config.grid.cols

        obs, _, _, _, info = env.step(action)

        assert info["outcome"] == "pending"
        assert obs["selected"][config.grid.rows - 1, 0] == 1
        assert int(obs["current_sum"]) == int(obs["grid"][config.grid.rows - 1, 0])

    def test_numpy_action(self, env, config):
        env.reset(seed=42)
        env.game.set_target(40)

        _, _, _, _, info = env.step(np.array((config.grid.rows - 1) * config.grid.cols))
        assert info["outcome"] == "pending"

    def test_clear_reports_delta_score(self, env, config):
        env.reset(seed=42)
        values = _empty_board(config)
        values[9][0] = 3
        values[9][1] = 4
        env.game.load_grid(values)
        env.game.set_target(7)

        env.step(54)
        obs, _, _, _, info = env.step(55)

        assert info["outcome"] == "cleared"
        assert info["delta_score"] == 14
        assert info["score"] == 14
        assert info["clears"] == 1
        # Classic clear injects a row
        assert int(obs["occupied_count"]) == config.grid.cols

    def test_empty_cell_ignored(self, env):
        obs, _ = env.reset(seed=42)

        obs2, _, _, _, info = env.step(0)

        assert info["outcome"] == "ignored"
        assert info["delta_score"] == 0
        np.testing.assert_array_equal(obs["grid"], obs2["grid"])

    def test_wait_ticks_clock(self, env):
        obs, _ = env.reset(seed=42)

        obs, _, _, _, info = env.step(env.wait_action)

        assert info["outcome"] == "wait"
        assert int(obs["next_row_in"]) == 14

    def test_time_mode_option(self, env):
        obs, info = env.reset(seed=42, options={"mode": "time"})

        assert info["mode"] == "time"
        assert int(obs["time_left"]) == 15
        assert int(obs["mode"]) == 1

        obs, _, _, _, _ = env.step(env.wait_action)
        assert int(obs["time_left"]) == 14

    def test_bad_mode_rejected(self, env):
        with pytest.raises(ValueError):
            env.reset(seed=42, options={"mode": "zen"})

    def test_deterministic_with_seed(self):
        """Same seed and actions produce the same boards."""
        env1 = SumGameEnv()
        env2 = SumGameEnv()

        obs1, _ = env1.reset(seed=123)
        obs2, _ = env2.reset(seed=123)
        np.testing.assert_array_equal(obs1["grid"], obs2["grid"])
        assert int(obs1["target"]) == int(obs2["target"])

        rng = np.random.default_rng(0)
        for _ in range(100):
            action = int(rng.integers(env1.action_space.n))
            obs1, _, t1, _, _ = env1.step(action)
            obs2, _, t2, _, _ = env2.step(action)
            np.testing.assert_array_equal(obs1["grid"], obs2["grid"])
            assert t1 == t2
            if t1:
                break

        env1.close()
        env2.close()

    def test_game_over_terminates(self, env, config):
        env.reset(seed=42)
        values = _empty_board(config)
        values[0][3] = 5
        env.game.load_grid(values)

        for i in range(config.timers.classic_inject_ticks):
            _, _, terminated, truncated, info = env.step(env.wait_action)
            if i < config.timers.classic_inject_ticks - 1:
                assert not terminated

        assert terminated
        assert not truncated
        assert info["status"] == "gameover"
        assert info["terminated_reason"] == "top_reached"

    def test_action_cap_truncates(self, tmp_path):
        with open(default_config_path()) as f:
            raw = yaml.safe_load(f)
        raw["caps"]["max_actions"] = 5
        path = tmp_path / "capped.yaml"
        path.write_text(yaml.safe_dump(raw))

        env = SumGameEnv(config_path=str(path))
        env.reset(seed=1)
        for _ in range(4):
            _, _, terminated, truncated, _ = env.step(env.wait_action)
            assert not (terminated or truncated)

        _, _, terminated, truncated, info = env.step(env.wait_action)
        assert truncated
        assert not terminated
        assert info["terminated_reason"] == "action_cap"
        env.close()

    def test_action_mask(self, env, config):
        env.reset(seed=42)
        mask = env.action_mask()

        assert mask.shape == (env.action_space.n,)
        assert mask[env.wait_action] == 1
        assert int(mask.sum()) == config.grid.initial_rows * config.grid.cols + 1

    def test_render_ansi(self, config):
        env = SumGameEnv(render_mode="ansi")
        env.reset(seed=42)

        text = env.render()

        assert isinstance(text, str)
        assert "target=" in text
        assert len(text.splitlines()) == config.grid.rows + 1
        env.close()

    def test_render_none_when_headless(self, env):
        env.reset(seed=42)
        assert env.render() is None
