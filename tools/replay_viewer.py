"""
Replay Viewer
=============

Step through a recorded replay in the terminal, printing the board after
every action.

Usage:
    python tools/replay_viewer.py replay.json [--delay 0.2] [--every 1]
    python -m tools.replay_viewer replay.json
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

# Add project root to path for direct script execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from sumgame.sum_core.env_gym import SumGameEnv
from sumgame.sum_core.replay_recorder import compute_config_hash, load_replay


def describe_action(action: int, env: SumGameEnv) -> str:
    if action == env.wait_action:
        return "WAIT"
    r, c = divmod(action, env.config.grid.cols)
    return f"select ({r}, {c})"


def view_replay(replay_path: str, delay: float = 0.2, every: int = 1) -> int:
    """
    Re-run a replay and print the board.

    Args:
        replay_path: Path to replay JSON.
        delay: Seconds to sleep between printed frames.
        every: Print every Nth step only.

    Returns:
        Final score reached.
    """
    replay = load_replay(replay_path)
    env = SumGameEnv(render_mode="ansi")

    if replay.get("config_hash") and replay["config_hash"] != compute_config_hash(env.config):
        print("WARNING: replay was recorded with a different game config")
    if replay.get("seed") is None:
        print("WARNING: replay has no seed, the board will differ from the recording")

    options = {"mode": replay["mode"]} if replay.get("mode") else None
    _, info = env.reset(seed=replay.get("seed"), options=options)
    print(f"Replay: agent={replay.get('agent')} seed={replay.get('seed')} "
          f"steps={replay.get('total_steps')}")
    print(env.render())

    for i, action in enumerate(replay["actions"]):
        _, _, terminated, truncated, info = env.step(int(action))
        if (i + 1) % every == 0 or terminated or truncated:
            print()
            print(f"Step {i + 1}: {describe_action(int(action), env)} -> {info['outcome']}")
            print(env.render())
            if delay > 0:
                time.sleep(delay)
        if terminated or truncated:
            break

    print()
    print(f"Final score: {info['score']} (recorded {replay.get('final_score')})")
    if info.get("terminated_reason"):
        print(f"Ended: {info['terminated_reason']}")

    env.close()
    return int(info["score"])


def main():
    parser = argparse.ArgumentParser(description="View a recorded SumGame replay")
    parser.add_argument("replay", type=str, help="Path to replay JSON file")
    parser.add_argument("--delay", type=float, default=0.2, help="Seconds between frames")
    parser.add_argument("--every", type=int, default=1, help="Print every Nth step")

    args = parser.parse_args()

    view_replay(
        replay_path=args.replay,
        delay=args.delay,
        every=max(1, args.every)
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
