"""Working memory for one orchestration run.

OrchestrationState is owned by exactly one in-flight orchestrate() call and
discarded when the call returns. Its lists are append-only: candidates and
verified statistics accumulate across attempts and are never removed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from stats_agent.errors import CollaboratorError
from stats_agent.schemas import (
    CandidateStatistic,
    OrchestrationRequest,
    OrchestrationResponse,
    VerifiedStatistic,
)


@dataclass
class AttemptRecord:
    """Accounting for a single loop iteration."""

    attempt: int
    requested: int = 0
    sources_found: int = 0
    candidates_received: int = 0
    candidates_accepted: int = 0
    discarded: int = 0
    verified: int = 0
    failed: int = 0
    total_candidates: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        """True if no collaborator call failed during the attempt."""
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attempt": self.attempt,
            "requested": self.requested,
            "sources_found": self.sources_found,
            "candidates_received": self.candidates_received,
            "candidates_accepted": self.candidates_accepted,
            "discarded": self.discarded,
            "verified": self.verified,
            "failed": self.failed,
            "total_candidates": self.total_candidates,
            "error": self.error,
        }


@dataclass
class OrchestrationState:
    """Accumulators for one orchestration run.

    Attributes:
        request: The normalized request (max_candidates resolved).
        all_candidates: Every candidate accepted into the run, in order.
        verified_statistics: Candidates confirmed by claim verification.
        total_failed: Candidates rejected by claim verification.
        total_discarded: Candidates dropped before verification.
        attempt: Completed loop iterations.
        candidates_budget_remaining: Candidates still allowed this run.
        attempts: Per-attempt records, in order.
        last_error: Most recent collaborator failure, if any.
    """

    request: OrchestrationRequest
    all_candidates: List[CandidateStatistic] = field(default_factory=list)
    verified_statistics: List[VerifiedStatistic] = field(default_factory=list)
    total_failed: int = 0
    total_discarded: int = 0
    attempt: int = 0
    candidates_budget_remaining: int = 0
    attempts: List[AttemptRecord] = field(default_factory=list)
    last_error: Optional[CollaboratorError] = None

    @classmethod
    def start(cls, request: OrchestrationRequest) -> "OrchestrationState":
        return cls(
            request=request,
            candidates_budget_remaining=request.max_candidates or 0,
        )

    @property
    def verified_count(self) -> int:
        return len(self.verified_statistics)

    @property
    def total_candidates(self) -> int:
        return len(self.all_candidates)

    @property
    def target_met(self) -> bool:
        return self.verified_count >= self.request.min_verified

    @property
    def collaborator_failures(self) -> int:
        """Attempts that ended in a collaborator failure."""
        return sum(1 for a in self.attempts if not a.succeeded)

    @property
    def every_attempt_failed(self) -> bool:
        """True if attempts were made and every one hit a collaborator failure."""
        return bool(self.attempts) and self.collaborator_failures == len(self.attempts)

    def within_budget(self, candidates: List[CandidateStatistic]) -> List[CandidateStatistic]:
        """The leading candidates that fit in the remaining budget."""
        return candidates[: max(self.candidates_budget_remaining, 0)]

    def seen_keys(self) -> set[tuple[str, str]]:
        return {c.dedupe_key() for c in self.all_candidates}

    def commit(
        self,
        accepted: List[CandidateStatistic],
        verified: List[VerifiedStatistic],
        failed: int,
        discarded: int,
    ) -> None:
        """Fold the outcome of a completed attempt into the accumulators.

        Called only once every collaborator call of the attempt succeeded,
        so a failed attempt leaves the state untouched.
        """
        self.all_candidates.extend(accepted)
        self.candidates_budget_remaining -= len(accepted)
        self.verified_statistics.extend(verified)
        self.total_failed += failed
        self.total_discarded += discarded

    def to_response(self) -> OrchestrationResponse:
        return OrchestrationResponse(
            topic=self.request.topic,
            statistics=list(self.verified_statistics),
            total_candidates=self.total_candidates,
            verified_count=self.verified_count,
            failed_count=self.total_failed,
            partial=not self.target_met,
            target_count=self.request.min_verified,
            attempts=self.attempt,
        )
