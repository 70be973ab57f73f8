"""Tests for merging partial results and the continuation loop."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from stats_agent.errors import CollaboratorError, CollaboratorUnavailableError, InvalidRequestError
from stats_agent.orchestration.continuation import (
    ContinuationPolicy,
    merge_responses,
    next_request,
    run_with_continuation,
)
from stats_agent.schemas import OrchestrationRequest, OrchestrationResponse, VerifiedStatistic

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def stats(names: list[str]) -> list[VerifiedStatistic]:
    return [
        VerifiedStatistic(
            name=name,
            value=1.5,
            source_url=f"https://www.who.int/data/{name}",
            excerpt=f"{name} was 1.5",
            verified=True,
        )
        for name in names
    ]


def response(names, target, total=None, failed=0, attempts=1, when=T0) -> OrchestrationResponse:
    return OrchestrationResponse(
        topic="malaria",
        statistics=stats(names),
        total_candidates=total if total is not None else len(names) + failed,
        failed_count=failed,
        target_count=target,
        timestamp=when,
        attempts=attempts,
    )


class TestMergeResponses:

    def test_concatenates_and_sums(self):
        first = response(["a", "b"], target=5, failed=3, attempts=3)
        second = response(["c", "a"], target=3, failed=1, attempts=2, when=T0 + timedelta(minutes=2))

        merged = merge_responses(first, second)

        assert [s.name for s in merged.statistics] == ["a", "b", "c", "a"]
        assert merged.verified_count == 4
        assert merged.failed_count == 4
        assert merged.total_candidates == 8
        assert merged.attempts == 5
        assert merged.target_count == 5
        assert merged.partial is True
        assert merged.timestamp == T0 + timedelta(minutes=2)

    def test_partial_recomputed_against_first_target(self):
        merged = merge_responses(response(["a", "b"], target=3), response(["c"], target=1))
        assert merged.partial is False


class TestNextRequest:

    def test_requests_shortfall_with_larger_budget(self):
        request = OrchestrationRequest(topic="malaria", min_verified=10, max_candidates=30)
        merged = response(["a"] * 6, target=10)

        follow_up = next_request(request, merged, ContinuationPolicy(candidate_increment=20))

        assert follow_up.min_verified == 4
        assert follow_up.max_candidates == 50
        assert follow_up.topic == "malaria"
        assert request.min_verified == 10


class TestRunWithContinuation:

    @pytest.mark.asyncio
    async def test_complete_first_round_not_continued(self):
        orchestrate = AsyncMock(return_value=response(["a", "b"], target=2))

        result = await run_with_continuation(
            orchestrate, OrchestrationRequest(topic="malaria", min_verified=2)
        )

        assert result.partial is False
        orchestrate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_partial_result_continued_and_merged(self):
        orchestrate = AsyncMock(
            side_effect=[response(["a", "b"], target=5), response(["c", "d", "e"], target=3)]
        )

        result = await run_with_continuation(
            orchestrate, OrchestrationRequest(topic="malaria", min_verified=5, max_candidates=15)
        )

        assert [s.name for s in result.statistics] == ["a", "b", "c", "d", "e"]
        assert result.partial is False
        follow_up = orchestrate.await_args_list[1].args[0]
        assert follow_up.min_verified == 3
        assert follow_up.max_candidates == 35

    @pytest.mark.asyncio
    async def test_first_round_uses_normalized_budget(self):
        orchestrate = AsyncMock(
            side_effect=[response([], target=4), response(["a", "b", "c", "d"], target=4)]
        )

        await run_with_continuation(
            orchestrate, OrchestrationRequest(topic="malaria", min_verified=4)
        )

        assert orchestrate.await_args_list[0].args[0].max_candidates == 12
        assert orchestrate.await_args_list[1].args[0].max_candidates == 32

    @pytest.mark.asyncio
    async def test_stops_after_max_rounds(self):
        orchestrate = AsyncMock(side_effect=lambda req: response([], target=req.min_verified))

        result = await run_with_continuation(
            orchestrate,
            OrchestrationRequest(topic="malaria", min_verified=5),
            ContinuationPolicy(max_rounds=2),
        )

        assert orchestrate.await_count == 2
        assert result.partial is True
        assert result.target_count == 5

    @pytest.mark.asyncio
    async def test_later_failure_keeps_merged_result(self):
        orchestrate = AsyncMock(
            side_effect=[
                response(["a"], target=3),
                CollaboratorUnavailableError(CollaboratorError("research", "HTTP 503"), 3),
            ]
        )

        result = await run_with_continuation(
            orchestrate, OrchestrationRequest(topic="malaria", min_verified=3)
        )

        assert [s.name for s in result.statistics] == ["a"]
        assert result.partial is True

    @pytest.mark.asyncio
    async def test_first_round_failure_propagates(self):
        orchestrate = AsyncMock(
            side_effect=CollaboratorUnavailableError(CollaboratorError("research", "HTTP 503"), 3)
        )

        with pytest.raises(CollaboratorUnavailableError):
            await run_with_continuation(
                orchestrate, OrchestrationRequest(topic="malaria", min_verified=3)
            )

    @pytest.mark.asyncio
    async def test_invalid_request_rejected_before_first_round(self):
        orchestrate = AsyncMock()

        with pytest.raises(InvalidRequestError):
            await run_with_continuation(orchestrate, OrchestrationRequest(topic="", min_verified=3))

        orchestrate.assert_not_called()
