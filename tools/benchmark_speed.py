"""
Performance Benchmark
=====================

Measures environment step throughput and raw engine intent throughput.

Usage:
    python -m tools.benchmark_speed [--steps S] [--mode classic|time]
"""

from __future__ import annotations

import argparse
import sys
import time

import numpy as np

from sumgame.sum_core.config_loader import load_config
from sumgame.sum_core.env_gym import SumGameEnv
from sumgame.sum_core.game import GameEngine
from sumgame.sum_core.state_snapshot import MODE_CLASSIC, MODES


def _random_action(env: SumGameEnv, rng: np.random.Generator) -> int:
    legal = np.flatnonzero(env.action_mask())
    return int(rng.choice(legal))


def benchmark_env(
    num_steps: int = 10000,
    mode: str = MODE_CLASSIC,
    seed: int = 42
) -> dict:
    """
    Benchmark single environment performance.

    Args:
        num_steps: Number of steps to run.
        mode: Game mode.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    env = SumGameEnv(mode=mode)
    rng = np.random.default_rng(seed)

    # Warmup
    env.reset(seed=seed)
    for _ in range(100):
        _, _, terminated, truncated, _ = env.step(_random_action(env, rng))
        if terminated or truncated:
            env.reset()

    # Benchmark
    env.reset(seed=seed)
    episodes = 0
    start = time.perf_counter()

    for _ in range(num_steps):
        _, _, terminated, truncated, _ = env.step(_random_action(env, rng))
        if terminated or truncated:
            episodes += 1
            env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": f"env/{mode}",
        "num_steps": num_steps,
        "episodes": episodes,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_engine(
    num_steps: int = 10000,
    mode: str = MODE_CLASSIC,
    seed: int = 42
) -> dict:
    """
    Benchmark the bare engine: random select_cell / tick intents.

    Args:
        num_steps: Number of intents to issue.
        mode: Game mode.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    engine = GameEngine(config=config, seed=seed)
    rng = np.random.default_rng(seed)
    rows, cols = config.grid.rows, config.grid.cols

    engine.initialize(mode)
    episodes = 0
    start = time.perf_counter()

    for _ in range(num_steps):
        if rng.random() < 0.05:
            engine.tick()
        else:
            engine.select_cell(int(rng.integers(rows)), int(rng.integers(cols)))
        if engine.is_over:
            episodes += 1
            engine.initialize(mode)

    elapsed = time.perf_counter() - start

    return {
        "mode": f"engine/{mode}",
        "num_steps": num_steps,
        "episodes": episodes,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def print_results(results: dict) -> None:
    print(f"  {results['mode']:<16} "
          f"{results['steps_per_second']:>10.0f} steps/s  "
          f"{results['ms_per_step']:.4f} ms/step  "
          f"({results['episodes']} episodes)")


def main():
    parser = argparse.ArgumentParser(description="Benchmark SumGame throughput")
    parser.add_argument("--steps", type=int, default=10000, help="Steps per benchmark")
    parser.add_argument("--mode", type=str, choices=MODES, default=None,
                        help="Only benchmark this mode")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    modes = [args.mode] if args.mode else list(MODES)

    print("=" * 60)
    print("SUMGAME BENCHMARK")
    print("=" * 60)
    for mode in modes:
        print_results(benchmark_engine(args.steps, mode, args.seed))
        print_results(benchmark_env(args.steps, mode, args.seed))
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
