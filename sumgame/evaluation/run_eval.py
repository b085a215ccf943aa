"""
Evaluation Harness
==================

Plays an agent through every seed of the seed bank, in one or both game
modes, and reports per-mode statistics.

Besides the score, each episode records how many clears the agent made, the
mean points per clear (bigger combinations are worth more) and how many
heartbeats it let pass. In time mode the heartbeat count is how long the
agent survived on the clock.

Usage:
    python -m sumgame.evaluation.run_eval --agent contestants/team_name [--mode all]
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import sys
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from sumgame.sum_core.config_loader import GameConfig, get_config
from sumgame.sum_core.env_gym import SumGameEnv
from sumgame.sum_core.state_snapshot import MODE_CLASSIC, MODES, validate_mode

AgentFn = Callable[[Dict[str, np.ndarray]], int]


@dataclass
class EpisodeResult:
    """One agent run on one seed."""
    seed: int
    mode: str
    final_score: int
    steps: int
    clears: int
    heartbeats: int     # WAIT actions, i.e. seconds of game time that passed
    best_clear: int     # Largest single-clear score
    termination_reason: str
    elapsed_time: float
    actions: Optional[List[int]] = None

    @property
    def points_per_clear(self) -> float:
        return self.final_score / self.clears if self.clears else 0.0


@dataclass
class ModeSummary:
    """Aggregate statistics for one mode."""
    mode: str
    episodes: int
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    mean_clears: float
    points_per_clear: float
    mean_heartbeats: float
    endings: Dict[str, int] = field(default_factory=dict)


@dataclass
class EvalSummary:
    """Everything one evaluation run produced."""
    modes: Dict[str, ModeSummary]
    results: List[EpisodeResult]
    total_time: float

    def __getitem__(self, mode: str) -> ModeSummary:
        return self.modes[mode]


def load_seed_bank(path: Optional[str] = None, config: Optional[GameConfig] = None) -> List[int]:
    """
    Load the evaluation seeds.

    Args:
        path: JSON file holding {"seeds": [...]}. Defaults to the seed bank
            named in the game config.
        config: Config to read the default location from.

    Raises:
        ValueError: If the file holds no seeds or repeats one.
    """
    if path is None:
        path = (config or get_config()).evaluation.seed_bank_path

    with open(path, "r") as f:
        seeds = [int(seed) for seed in json.load(f).get("seeds", [])]

    if not seeds:
        raise ValueError(f"Seed bank {path} has no seeds")
    if len(set(seeds)) != len(seeds):
        raise ValueError(f"Seed bank {path} repeats a seed")
    return seeds


def load_agent(agent_path: str) -> AgentFn:
    """
    Import an agent and return its act callable.

    The module must define a SumAgent class with act(obs), or a module-level
    act(obs) function. A SumAgent is instantiated with no arguments.
    """
    agent_path = Path(agent_path)
    agent_file = agent_path / "agent.py" if agent_path.is_dir() else agent_path
    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    module_name = f"sumgame_agent_{agent_file.parent.name}"
    spec = importlib.util.spec_from_file_location(module_name, agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load agent module from {agent_file}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)

    agent_cls = getattr(module, "SumAgent", None)
    if agent_cls is not None:
        agent = agent_cls()
        if not callable(getattr(agent, "act", None)):
            raise AttributeError("SumAgent class must have an 'act' method")
        return agent.act

    if callable(getattr(module, "act", None)):
        return module.act

    raise AttributeError(
        f"{agent_file} defines neither a 'SumAgent' class nor an 'act' function"
    )


def _reset_agent(agent_fn: AgentFn) -> None:
    # Bound act methods get their owner's reset() between episodes
    owner = getattr(agent_fn, "__self__", None)
    reset = getattr(owner, "reset", None)
    if callable(reset):
        reset()


def run_episode(
    env: SumGameEnv,
    agent_fn: AgentFn,
    seed: int,
    mode: str = MODE_CLASSIC,
    record_actions: bool = False
) -> EpisodeResult:
    """Play one episode to termination or the action cap."""
    _reset_agent(agent_fn)
    obs, info = env.reset(seed=seed, options={"mode": mode})

    actions: Optional[List[int]] = [] if record_actions else None
    heartbeats = 0
    best_clear = 0
    start = time.perf_counter()

    done = False
    while not done:
        action = int(agent_fn(obs))
        if actions is not None:
            actions.append(action)
        if action == env.wait_action:
            heartbeats += 1

        obs, _, terminated, truncated, info = env.step(action)
        best_clear = max(best_clear, info["delta_score"])
        done = terminated or truncated

    return EpisodeResult(
        seed=seed,
        mode=mode,
        final_score=info["score"],
        steps=info["steps"],
        clears=info["clears"],
        heartbeats=heartbeats,
        best_clear=best_clear,
        termination_reason=info["terminated_reason"],
        elapsed_time=time.perf_counter() - start,
        actions=actions
    )


def summarize(mode: str, results: Sequence[EpisodeResult]) -> ModeSummary:
    """Aggregate one mode's episodes."""
    scores = np.array([r.final_score for r in results], dtype=np.int64)
    clears = np.array([r.clears for r in results], dtype=np.int64)
    heartbeats = np.array([r.heartbeats for r in results], dtype=np.int64)
    total_clears = int(clears.sum())

    return ModeSummary(
        mode=mode,
        episodes=len(results),
        mean_score=float(scores.mean()),
        std_score=float(scores.std()),
        min_score=int(scores.min()),
        max_score=int(scores.max()),
        median_score=float(np.median(scores)),
        mean_clears=float(clears.mean()),
        points_per_clear=float(scores.sum() / total_clears) if total_clears else 0.0,
        mean_heartbeats=float(heartbeats.mean()),
        endings=dict(Counter(r.termination_reason for r in results))
    )


def evaluate_agent(
    agent_fn: AgentFn,
    seeds: Optional[Sequence[int]] = None,
    modes: Sequence[str] = (MODE_CLASSIC,),
    record_actions: bool = False,
    verbose: bool = True
) -> EvalSummary:
    """
    Run agent_fn over every seed in every requested mode.

    Args:
        agent_fn: Callable (obs) -> action.
        seeds: Seeds to play. Uses the configured seed bank if None.
        modes: Game modes to evaluate.
        record_actions: Keep each episode's action list.
        verbose: Print one line per episode and the summary table.
    """
    modes = [validate_mode(m) for m in modes]
    if seeds is None:
        seeds = load_seed_bank()

    results: List[EpisodeResult] = []
    summaries: Dict[str, ModeSummary] = {}
    start = time.perf_counter()

    env = SumGameEnv()
    try:
        for mode in modes:
            if verbose:
                print(f"{mode}: {len(seeds)} seeds")
            mode_results = []
            for seed in seeds:
                result = run_episode(env, agent_fn, seed, mode, record_actions)
                mode_results.append(result)
                if verbose:
                    print(f"  seed {seed:>6}: score={result.final_score:<6} "
                          f"clears={result.clears:<4} heartbeats={result.heartbeats:<5} "
                          f"{result.termination_reason}")
            results.extend(mode_results)
            summaries[mode] = summarize(mode, mode_results)
    finally:
        env.close()

    summary = EvalSummary(
        modes=summaries,
        results=results,
        total_time=time.perf_counter() - start
    )
    if verbose:
        print()
        print(format_summary(summary))
    return summary


def format_summary(summary: EvalSummary) -> str:
    """Render the per-mode statistics as a text table."""
    header = (f"{'mode':<8} {'mean':>9} {'std':>8} {'min':>6} {'median':>8} {'max':>6} "
              f"{'clears':>7} {'pts/clr':>8} {'beats':>7}  endings")
    lines = [header, "-" * len(header)]
    for s in summary.modes.values():
        endings = ", ".join(f"{k}={v}" for k, v in sorted(s.endings.items()))
        lines.append(
            f"{s.mode:<8} {s.mean_score:>9.1f} {s.std_score:>8.1f} {s.min_score:>6} "
            f"{s.median_score:>8.1f} {s.max_score:>6} {s.mean_clears:>7.1f} "
            f"{s.points_per_clear:>8.1f} {s.mean_heartbeats:>7.1f}  {endings}"
        )
    lines.append(f"total time {summary.total_time:.2f}s")
    return "\n".join(lines)


def save_results(summary: EvalSummary, agent_name: str, output_path: str) -> None:
    """Write summary and per-episode rows (without action lists) as JSON."""
    data = {
        "agent": agent_name,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "total_time": summary.total_time,
        "modes": {mode: asdict(s) for mode, s in summary.modes.items()},
        "results": [
            {k: v for k, v in asdict(r).items() if k != "actions"}
            for r in summary.results
        ],
    }
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)
    print(f"Results saved to {output_path}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate a SumGame agent")
    parser.add_argument("--agent", required=True,
                        help="Agent directory or agent.py file")
    parser.add_argument("--mode", choices=[*MODES, "all"], default=MODE_CLASSIC,
                        help="Game mode to evaluate, or 'all'")
    parser.add_argument("--seeds", default=None,
                        help="Seed bank JSON (defaults to the configured one)")
    parser.add_argument("--output", default=None, help="Write results JSON here")
    parser.add_argument("--record", action="store_true",
                        help="Keep action lists for replay")
    parser.add_argument("--quiet", action="store_true", help="Only print the summary")
    args = parser.parse_args(argv)

    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}")
        return 1

    seeds = load_seed_bank(args.seeds) if args.seeds else None
    modes = list(MODES) if args.mode == "all" else [args.mode]

    summary = evaluate_agent(
        agent_fn,
        seeds=seeds,
        modes=modes,
        record_actions=args.record,
        verbose=not args.quiet
    )
    if args.quiet:
        print(format_summary(summary))

    if args.output:
        save_results(summary, Path(args.agent).name, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
