"""Retry and candidate-budget accounting for the orchestration loop."""

from typing import Optional

from stats_agent.errors import InvalidRequestError
from stats_agent.orchestration.config import DEFAULT_CANDIDATE_MULTIPLIER, EngineConfig
from stats_agent.orchestration.state import OrchestrationState
from stats_agent.schemas import OrchestrationRequest


def normalize_request(request: OrchestrationRequest) -> OrchestrationRequest:
    """Validate a request and resolve defaults.

    Returns a new request with max_candidates filled in
    (3 x min_verified when unset or zero). The input is left untouched.

    Raises:
        InvalidRequestError: Empty topic, min_verified < 1 or negative
            max_candidates.
    """
    if not request.topic or not request.topic.strip():
        raise InvalidRequestError("topic is required")
    if request.min_verified < 1:
        raise InvalidRequestError(
            f"min_verified must be >= 1, got {request.min_verified}"
        )
    if request.max_candidates is not None and request.max_candidates < 0:
        raise InvalidRequestError(
            f"max_candidates must be >= 0, got {request.max_candidates}"
        )

    if not request.max_candidates:
        return request.model_copy(
            update={"max_candidates": request.min_verified * DEFAULT_CANDIDATE_MULTIPLIER}
        )
    return request


def should_continue(state: OrchestrationState, config: EngineConfig) -> bool:
    """Loop guard: attempts left and target not yet met."""
    return state.attempt < config.max_retries and not state.target_met


def plan_batch(state: OrchestrationState, config: EngineConfig) -> Optional[int]:
    """Number of candidates to request in the next attempt.

    Always asks for at least min_batch so that expected verification
    failures do not force another round, then clamps to the remaining
    candidate budget.

    Returns:
        Candidates to request, or None when the budget is exhausted.
    """
    shortfall = state.request.min_verified - state.verified_count
    needed = max(shortfall, config.min_batch)

    if state.candidates_budget_remaining <= 0:
        return None
    return min(needed, state.candidates_budget_remaining)


def discovery_count(needed: int, config: EngineConfig) -> int:
    """Sources to ask discovery for: needed plus the look-ahead margin."""
    return needed + config.lookahead_margin


def extraction_bounds(needed: int, config: EngineConfig) -> tuple[int, int]:
    """(min, max) candidate counts passed to statistic extraction."""
    return needed, needed + config.lookahead_margin
