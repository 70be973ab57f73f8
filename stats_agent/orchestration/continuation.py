"""Caller-side continuation of partial orchestration results.

When an orchestration comes back partial, a caller may issue follow-up
requests for the shortfall with a larger candidate ceiling and merge the
results. Merging is plain concatenation and summation: statistics found in
several rounds are not de-duplicated.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable

from loguru import logger

from stats_agent.errors import StatsAgentError
from stats_agent.orchestration.budget import normalize_request
from stats_agent.schemas import OrchestrationRequest, OrchestrationResponse

Orchestrate = Callable[[OrchestrationRequest], Awaitable[OrchestrationResponse]]


@dataclass(frozen=True)
class ContinuationPolicy:
    """How far a caller keeps going after a partial result.

    Attributes:
        max_rounds: Total orchestration calls, including the first.
        candidate_increment: Added to max_candidates for each new round.
    """

    max_rounds: int = 3
    candidate_increment: int = 20


def merge_responses(
    first: OrchestrationResponse,
    second: OrchestrationResponse,
) -> OrchestrationResponse:
    """Merge a continuation response onto an earlier one.

    statistics is first ++ second in order; counters are summed. The target
    of the first response is kept and partial is recomputed against it.
    """
    statistics = list(first.statistics) + list(second.statistics)
    verified_count = first.verified_count + second.verified_count
    return OrchestrationResponse(
        topic=first.topic,
        statistics=statistics,
        total_candidates=first.total_candidates + second.total_candidates,
        verified_count=verified_count,
        failed_count=first.failed_count + second.failed_count,
        partial=verified_count < first.target_count,
        target_count=first.target_count,
        timestamp=max(first.timestamp, second.timestamp),
        attempts=first.attempts + second.attempts,
    )


def next_request(
    request: OrchestrationRequest,
    merged: OrchestrationResponse,
    policy: ContinuationPolicy,
) -> OrchestrationRequest:
    """Derive the request for the next round from the merged result so far."""
    shortfall = merged.target_count - merged.verified_count
    return request.model_copy(
        update={
            "min_verified": shortfall,
            "max_candidates": (request.max_candidates or 0) + policy.candidate_increment,
        }
    )


async def run_with_continuation(
    orchestrate: Orchestrate,
    request: OrchestrationRequest,
    policy: ContinuationPolicy = ContinuationPolicy(),
) -> OrchestrationResponse:
    """Run orchestrate() and follow up on partial results.

    A failure in the first round propagates. A failure in a later round
    stops the continuation and returns what was merged so far.
    """
    log = logger.bind(component="Continuation")
    current = normalize_request(request)
    merged = await orchestrate(current)
    rounds = 1

    while merged.partial and rounds < policy.max_rounds:
        current = next_request(current, merged, policy)
        log.info(
            f"Continuation round {rounds + 1}/{policy.max_rounds}: "
            f"{current.min_verified} more statistics, max {current.max_candidates} candidates"
        )
        try:
            follow_up = await orchestrate(current)
        except StatsAgentError as e:
            log.warning(f"Continuation round {rounds + 1} failed, keeping merged result: {e}")
            break
        merged = merge_responses(merged, follow_up)
        rounds += 1

    if merged.partial:
        log.warning(
            f"Found {merged.verified_count}/{merged.target_count} verified statistics "
            f"after {rounds} round(s)"
        )
    return merged
