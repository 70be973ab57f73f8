"""Orchestration engine: discovery -> extraction -> verification with retries.

Drives the three collaborators in sequence until the verified-statistic
target is met, the candidate budget is exhausted, or the attempt ceiling is
reached.

Per attempt:
1. Plan the batch: max(shortfall, min_batch), clamped to the candidate budget
2. Discover needed + lookahead_margin sources (zero sources ends the attempt)
3. Extract candidates; keep those that fit the budget
4. Discard candidates with a zero value or blank excerpt
5. Verify the rest; promote verified ones into the result

A CollaboratorError in any step ends the attempt without touching the
accumulated state; the next attempt starts from the same state. Only input
errors, the caller's deadline, cancellation and a total outage are raised.

Usage:
    from stats_agent.orchestration import OrchestrationEngine

    engine = OrchestrationEngine(discoverer, extractor, verifier)
    response = await engine.orchestrate(
        OrchestrationRequest(topic="climate change", min_verified=10)
    )
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

from stats_agent.agents.protocols import (
    ClaimVerifier,
    SourceDiscoverer,
    StatisticExtractor,
)
from stats_agent.errors import (
    CollaboratorError,
    CollaboratorUnavailableError,
    OrchestrationTimeoutError,
)
from stats_agent.orchestration.budget import (
    discovery_count,
    extraction_bounds,
    normalize_request,
    plan_batch,
    should_continue,
)
from stats_agent.orchestration.config import EngineConfig
from stats_agent.orchestration.state import AttemptRecord, OrchestrationState
from stats_agent.schemas import (
    CandidateStatistic,
    OrchestrationRequest,
    OrchestrationResponse,
    VerifiedStatistic,
)
from stats_agent.utils.logging import (
    get_correlation_id,
    get_structured_logger,
    run_context,
)

ProgressCallback = Callable[[AttemptRecord], Awaitable[None]]


class OrchestrationEngine:
    """Bounded retry loop over the discovery/extraction/verification pipeline.

    The engine holds no per-run state, so one instance can serve concurrent
    orchestrate() calls.
    """

    def __init__(
        self,
        discoverer: SourceDiscoverer,
        extractor: StatisticExtractor,
        verifier: ClaimVerifier,
        config: Optional[EngineConfig] = None,
    ) -> None:
        """Initialize OrchestrationEngine.

        Args:
            discoverer: Source discovery capability.
            extractor: Statistic extraction capability.
            verifier: Claim verification capability.
            config: Engine tuning; defaults to EngineConfig().
        """
        self.discoverer = discoverer
        self.extractor = extractor
        self.verifier = verifier
        self.config = config or EngineConfig()
        self._logger = get_structured_logger(__name__, component="OrchestrationEngine")

    async def orchestrate(
        self,
        request: OrchestrationRequest,
        timeout: Optional[float] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> OrchestrationResponse:
        """Find verified statistics for a request.

        Args:
            request: What to look for. Validated before any collaborator call.
            timeout: Deadline in seconds for the whole call.
            progress_callback: Awaited after every attempt with its record.

        Returns:
            OrchestrationResponse; partial=True if the target was not met.

        Raises:
            InvalidRequestError: Bad input.
            OrchestrationTimeoutError: timeout expired; no response is built.
            CollaboratorUnavailableError: Every attempt failed at the
                collaborator level (when fail_on_total_outage is set).
            asyncio.CancelledError: The caller cancelled the call.
        """
        request = normalize_request(request)

        deadline = asyncio.timeout(timeout)
        try:
            async with deadline:
                return await self._run(request, progress_callback)
        except TimeoutError as e:
            # A collaborator timing out on its own is not our deadline
            if not deadline.expired():
                raise
            self._logger.warning(
                "orchestration_timeout", topic=request.topic[:80], timeout=timeout
            )
            raise OrchestrationTimeoutError(
                f"orchestration for {request.topic!r} exceeded {timeout}s"
            ) from e

    async def _run(
        self,
        request: OrchestrationRequest,
        progress_callback: Optional[ProgressCallback],
    ) -> OrchestrationResponse:
        with run_context(get_correlation_id(), request.topic):
            return await self._run_loop(request, progress_callback)

    async def _run_loop(
        self,
        request: OrchestrationRequest,
        progress_callback: Optional[ProgressCallback],
    ) -> OrchestrationResponse:
        state = OrchestrationState.start(request)
        log = self._logger
        log.info(
            "orchestration_started",
            target=request.min_verified,
            max_candidates=request.max_candidates,
            reputable_only=request.reputable_only,
            max_retries=self.config.max_retries,
        )

        while should_continue(state, self.config):
            needed = plan_batch(state, self.config)
            if needed is None:
                log.info(
                    "candidate_budget_exhausted",
                    max_candidates=request.max_candidates,
                    attempts=state.attempt,
                )
                break

            record = AttemptRecord(attempt=state.attempt + 1, requested=needed)
            log.info(
                "attempt_started",
                attempt=record.attempt,
                requested=needed,
                budget_remaining=state.candidates_budget_remaining,
            )

            try:
                await self._run_attempt(state, record, needed, log)
            except CollaboratorError as e:
                record.error = str(e)
                state.last_error = e
                log.warning(
                    "attempt_failed",
                    attempt=record.attempt,
                    service=e.service,
                    error=str(e),
                )

            state.attempt += 1
            record.total_candidates = state.total_candidates
            state.attempts.append(record)

            log.info(
                "attempt_complete",
                **record.to_dict(),
                verified_total=state.verified_count,
                target=request.min_verified,
            )
            if progress_callback:
                await progress_callback(record)

        if (
            self.config.fail_on_total_outage
            and state.every_attempt_failed
            and state.last_error is not None
        ):
            log.error(
                "orchestration_failed",
                attempts=state.attempt,
                collaborator_failures=state.collaborator_failures,
                error=str(state.last_error),
            )
            raise CollaboratorUnavailableError(state.last_error, state.attempt)

        response = state.to_response()
        if response.partial:
            log.warning(
                "orchestration_partial",
                verified=response.verified_count,
                target=response.target_count,
                total_candidates=response.total_candidates,
                failed=response.failed_count,
                discarded=state.total_discarded,
                attempts=state.attempt,
                collaborator_failures=state.collaborator_failures,
            )
        else:
            log.info(
                "orchestration_complete",
                verified=response.verified_count,
                target=response.target_count,
                total_candidates=response.total_candidates,
                failed=response.failed_count,
                attempts=state.attempt,
                collaborator_failures=state.collaborator_failures,
            )
        return response

    async def _run_attempt(
        self,
        state: OrchestrationState,
        record: AttemptRecord,
        needed: int,
        log: structlog.BoundLogger,
    ) -> None:
        """Run one discovery -> extraction -> verification pass.

        State is committed only at the end, after every call succeeded.
        """
        request = state.request

        sources = await self.discoverer.discover(
            request.topic,
            discovery_count(needed, self.config),
            request.reputable_only,
        )
        record.sources_found = len(sources)
        if not sources:
            log.info("no_sources_found", attempt=record.attempt)
            return

        min_count, max_count = extraction_bounds(needed, self.config)
        candidates = await self.extractor.extract(
            request.topic, sources, min_count, max_count
        )
        record.candidates_received = len(candidates)

        if self.config.dedupe_candidates:
            candidates = self._dedupe(state, candidates)

        accepted = state.within_budget(candidates)
        checkable = [c for c in accepted if c.is_checkable()]
        discarded = len(accepted) - len(checkable)
        record.candidates_accepted = len(accepted)
        record.discarded = discarded
        if discarded:
            log.debug("candidates_discarded", attempt=record.attempt, count=discarded)

        verified: list[VerifiedStatistic] = []
        failed = 0
        if checkable:
            verdicts = await self.verifier.verify(checkable)
            for verdict in verdicts:
                if verdict.verified:
                    verified.append(verdict.statistic.model_copy(update={"verified": True}))
                else:
                    failed += 1
                    log.debug(
                        "statistic_failed_verification",
                        name=verdict.statistic.name[:80],
                        source_url=verdict.statistic.source_url,
                        reason=verdict.reason,
                    )

        state.commit(accepted, verified, failed, discarded)
        record.verified = len(verified)
        record.failed = failed

    @staticmethod
    def _dedupe(
        state: OrchestrationState,
        candidates: list[CandidateStatistic],
    ) -> list[CandidateStatistic]:
        seen = state.seen_keys()
        unique: list[CandidateStatistic] = []
        for candidate in candidates:
            key = candidate.dedupe_key()
            if key in seen:
                continue
            seen.add(key)
            unique.append(candidate)
        return unique
