"""
Tests for the bundled agents and the evaluation harness.
"""

import json
from pathlib import Path

import numpy as np
import pytest

from contestants.baseline_greedy import SumAgent, find_value_combo
from sumgame.evaluation.run_eval import (
    EpisodeResult,
    evaluate_agent,
    format_summary,
    load_agent,
    load_seed_bank,
    main,
    run_episode,
    summarize,
)
from sumgame.sum_core.env_gym import SumGameEnv
from sumgame.sum_core.state_snapshot import MODES

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONTESTANTS = PROJECT_ROOT / "contestants"


def _obs(grid, target, selected=None):
    grid = np.asarray(grid, dtype=np.int8)
    if selected is None:
        selected = np.zeros_like(grid)
    return {
        "grid": grid,
        "selected": np.asarray(selected, dtype=np.int8),
        "target": np.array(target, dtype=np.int32),
    }


class TestFindValueCombo:
    """Test the greedy combination search."""

    def test_prefers_more_blocks(self):
        combo = find_value_combo({1: 2, 2: 2, 6: 1}, 6)
        assert len(combo) == 4
        assert sum(combo) == 6

    def test_respects_counts(self):
        # Only one 5 on the board, so 5 + 5 is not allowed
        assert find_value_combo({5: 1}, 10) is None
        assert find_value_combo({5: 2}, 10) == (5, 5)

    def test_single_block(self):
        assert find_value_combo({7: 1, 9: 1}, 7) == (7,)

    def test_no_combo(self):
        assert find_value_combo({9: 3}, 5) is None

    def test_max_pick_limit(self):
        assert find_value_combo({1: 6}, 5) is None
        assert find_value_combo({1: 6}, 5, max_pick=5) == (1, 1, 1, 1, 1)


class TestGreedyAgent:
    """Test the greedy agent's step-by-step behaviour."""

    def test_selects_plan_then_waits(self):
        grid = np.zeros((10, 6), dtype=np.int8)
        grid[9, 0] = 4
        grid[9, 1] = 6
        agent = SumAgent()

        assert agent.act(_obs(grid, 10)) == 54

        selected = np.zeros_like(grid)
        selected[9, 0] = 1
        assert agent.act(_obs(grid, 10, selected)) == 55

        cleared = np.zeros_like(grid)
        assert agent.act(_obs(cleared, 10)) == 60

    def test_prefers_top_cells(self):
        grid = np.zeros((10, 6), dtype=np.int8)
        grid[9, 2] = 8
        grid[5, 4] = 8
        agent = SumAgent()

        assert agent.act(_obs(grid, 8)) == 5 * 6 + 4

    def test_drops_unplanned_selection(self):
        grid = np.full((10, 6), 9, dtype=np.int8)
        selected = np.zeros_like(grid)
        selected[3, 2] = 1
        agent = SumAgent()

        assert agent.act(_obs(grid, 18, selected)) == 3 * 6 + 2




def _result(score, clears, reason, heartbeats=0):
    return EpisodeResult(
        seed=0, mode="classic", final_score=score, steps=10, clears=clears,
        heartbeats=heartbeats, best_clear=0, termination_reason=reason,
        elapsed_time=0.0
    )


def _write_seeds(tmp_path, seeds):
    path = tmp_path / "seeds.json"
    path.write_text(json.dumps({"seeds": seeds}))
    return str(path)


class TestSeedBank:
    """Test seed bank loading."""

    def test_default_seed_bank(self):
        seeds = load_seed_bank()
        assert len(seeds) == 20
        assert len(set(seeds)) == len(seeds)

    def test_custom_file(self, tmp_path):
        assert load_seed_bank(_write_seeds(tmp_path, [3, 1, 2])) == [3, 1, 2]

    def test_empty_bank_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            load_seed_bank(_write_seeds(tmp_path, []))

    def test_repeated_seed_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            load_seed_bank(_write_seeds(tmp_path, [5, 5]))


class TestEvaluation:
    """Test the evaluation harness."""

    def test_summarize(self):
        summary = summarize("classic", [
            _result(100, 4, "top_reached", heartbeats=30),
            _result(50, 1, "action_cap", heartbeats=10),
        ])

        assert summary.episodes == 2
        assert summary.mean_score == 75.0
        assert summary.min_score == 50
        assert summary.max_score == 100
        assert summary.mean_clears == 2.5
        assert summary.points_per_clear == 30.0
        assert summary.mean_heartbeats == 20.0
        assert summary.endings == {"top_reached": 1, "action_cap": 1}

    def test_points_per_clear_without_clears(self):
        assert _result(0, 0, "top_reached").points_per_clear == 0.0
        assert summarize("time", [_result(0, 0, "top_reached")]).points_per_clear == 0.0

    def test_greedy_in_every_mode(self):
        summary = evaluate_agent(SumAgent().act, seeds=[1, 2], modes=MODES, verbose=False)

        assert set(summary.modes) == set(MODES)
        assert len(summary.results) == 2 * len(MODES)
        for mode in MODES:
            stats = summary[mode]
            assert stats.episodes == 2
            assert stats.min_score <= stats.mean_score <= stats.max_score
            assert stats.max_score > 0
            assert sum(stats.endings.values()) == 2
        assert "classic" in format_summary(summary)

    def test_run_episode_deterministic(self):
        env = SumGameEnv()
        r1 = run_episode(env, SumAgent().act, 11, "time", record_actions=True)
        r2 = run_episode(env, SumAgent().act, 11, "time", record_actions=True)
        env.close()

        assert r1.final_score == r2.final_score
        assert r1.actions == r2.actions
        assert r1.steps == len(r1.actions)
        assert r1.heartbeats == r1.actions.count(env.wait_action)
        assert r1.best_clear <= r1.final_score

    def test_load_greedy_from_directory(self):
        act = load_agent(str(CONTESTANTS / "baseline_greedy"))
        summary = evaluate_agent(act, seeds=[3], verbose=False)
        assert summary.results[0].termination_reason in ("top_reached", "action_cap")

    def test_load_template_agent(self):
        act = load_agent(str(CONTESTANTS / "team_template" / "agent.py"))
        env = SumGameEnv()
        result = run_episode(env, act, 4)
        env.close()
        assert result.steps > 0

    def test_missing_agent(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_agent(str(tmp_path / "nobody"))

    def test_cli_writes_results(self, tmp_path, capsys):
        output = tmp_path / "results.json"
        code = main([
            "--agent", str(CONTESTANTS / "baseline_greedy"),
            "--mode", "all",
            "--seeds", _write_seeds(tmp_path, [8]),
            "--output", str(output),
            "--quiet",
        ])

        assert code == 0
        data = json.loads(output.read_text())
        assert set(data["modes"]) == set(MODES)
        assert len(data["results"]) == len(MODES)
        assert "actions" not in data["results"][0]
        assert "pts/clr" in capsys.readouterr().out

    def test_cli_bad_agent(self, tmp_path):
        assert main(["--agent", str(tmp_path / "missing")]) == 1
