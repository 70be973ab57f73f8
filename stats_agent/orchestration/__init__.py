"""Orchestration engine, retry/budget accounting and continuation.

Core workflow:
1. OrchestrationEngine runs discovery -> extraction -> verification in a
   bounded retry loop over an OrchestrationState accumulator
2. budget computes per-attempt batch sizes against the candidate budget
3. continuation lets callers follow up on partial results and merge them
"""

from stats_agent.orchestration.config import EngineConfig
from stats_agent.orchestration.continuation import (
    ContinuationPolicy,
    merge_responses,
    run_with_continuation,
)
from stats_agent.orchestration.engine import OrchestrationEngine
from stats_agent.orchestration.state import AttemptRecord, OrchestrationState

__all__ = [
    "AttemptRecord",
    "ContinuationPolicy",
    "EngineConfig",
    "OrchestrationEngine",
    "OrchestrationState",
    "merge_responses",
    "run_with_continuation",
]
