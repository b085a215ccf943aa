"""
Evaluation Package
==================

Contains the seed bank and evaluation harness for scoring agent submissions.
"""

from sumgame.evaluation.run_eval import (
    EvalSummary,
    EpisodeResult,
    evaluate_agent,
    load_agent,
    load_seed_bank,
    run_episode,
)

__all__ = [
    "EvalSummary",
    "EpisodeResult",
    "evaluate_agent",
    "load_agent",
    "load_seed_bank",
    "run_episode",
]
