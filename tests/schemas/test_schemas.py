"""Tests for statistic, collaborator and orchestration schemas."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from stats_agent.schemas import (
    CandidateStatistic,
    OrchestrationRequest,
    OrchestrationResponse,
    VerificationResponse,
    VerifiedStatistic,
)


@pytest.fixture
def candidate() -> CandidateStatistic:
    return CandidateStatistic(
        name="Share of adults with a bachelor's degree",
        value=37.7,
        unit="%",
        source="U.S. Census Bureau",
        source_url="https://www.census.gov/library/stories/2022/education.html",
        excerpt="37.7% of adults age 25 and older had a bachelor's degree",
    )


class TestCandidateStatistic:

    def test_checkable(self, candidate):
        assert candidate.is_checkable() is True

    def test_zero_value_not_checkable(self, candidate):
        assert candidate.model_copy(update={"value": 0}).is_checkable() is False

    def test_blank_excerpt_not_checkable(self, candidate):
        assert candidate.model_copy(update={"excerpt": " \n"}).is_checkable() is False

    def test_dedupe_key(self, candidate):
        assert candidate.dedupe_key() == (candidate.source_url, candidate.excerpt)

    def test_value_required(self):
        with pytest.raises(ValidationError):
            CandidateStatistic(name="x", source_url="https://a.gov")


class TestVerifiedStatistic:

    def test_from_candidate(self, candidate):
        when = datetime(2025, 1, 2, tzinfo=timezone.utc)
        stat = VerifiedStatistic.from_candidate(candidate, verified=True, date_found=when)

        assert stat.verified is True
        assert stat.date_found == when
        assert stat.name == candidate.name
        assert stat.value == candidate.value

    def test_date_found_defaults_to_now(self, candidate):
        stat = VerifiedStatistic.from_candidate(candidate, verified=False)
        assert stat.date_found.tzinfo is not None


class TestVerificationResponse:

    def test_parses_service_body(self, candidate):
        stat = VerifiedStatistic.from_candidate(candidate, verified=True)
        body = {
            "results": [
                {"statistic": stat.model_dump(mode="json"), "verified": True},
                {
                    "statistic": stat.model_dump(mode="json"),
                    "verified": False,
                    "reason": "Excerpt not found in source content",
                },
            ],
            "verified_count": 1,
            "failed_count": 1,
        }

        response = VerificationResponse.model_validate(body)

        assert [v.verified for v in response.results] == [True, False]
        assert response.results[1].reason == "Excerpt not found in source content"
        assert response.timestamp.tzinfo is not None


class TestOrchestrationRequest:

    def test_wire_alias(self):
        request = OrchestrationRequest.model_validate(
            {"topic": "education", "min_verified_stats": 8}
        )
        assert request.min_verified == 8
        assert request.model_dump(by_alias=True)["min_verified_stats"] == 8

    def test_field_name_accepted(self):
        assert OrchestrationRequest(topic="education", min_verified=3).min_verified == 3

    def test_frozen(self):
        request = OrchestrationRequest(topic="education", min_verified=3)
        with pytest.raises(ValidationError):
            request.min_verified = 4

    def test_defaults(self):
        request = OrchestrationRequest(topic="education", min_verified=3)
        assert request.max_candidates is None
        assert request.reputable_only is False


class TestOrchestrationResponse:

    def test_counts_derived(self, candidate):
        stat = VerifiedStatistic.from_candidate(candidate, verified=True)
        response = OrchestrationResponse(topic="education", statistics=[stat], target_count=2)

        assert response.verified_count == 1
        assert response.partial is True

    def test_verified_count_must_match(self, candidate):
        stat = VerifiedStatistic.from_candidate(candidate, verified=True)
        with pytest.raises(ValidationError, match="verified_count"):
            OrchestrationResponse(
                topic="education", statistics=[stat], verified_count=3, target_count=1
            )

    def test_unverified_statistic_rejected(self, candidate):
        stat = VerifiedStatistic.from_candidate(candidate, verified=False)
        with pytest.raises(ValidationError, match="unverified"):
            OrchestrationResponse(topic="education", statistics=[stat], target_count=1)

    def test_validation_leaves_input_untouched(self, candidate):
        stat = VerifiedStatistic.from_candidate(candidate, verified=True)
        body = {"topic": "education", "statistics": [stat], "target_count": 2}

        response = OrchestrationResponse.model_validate(body)

        assert response.verified_count == 1
        assert body == {"topic": "education", "statistics": [stat], "target_count": 2}

    def test_partial_must_match_target(self):
        with pytest.raises(ValidationError, match="partial"):
            OrchestrationResponse(topic="education", statistics=[], target_count=2, partial=False)

    def test_json_round_trip(self, candidate):
        stat = VerifiedStatistic.from_candidate(candidate, verified=True)
        response = OrchestrationResponse(
            topic="education", statistics=[stat], total_candidates=4, failed_count=3,
            target_count=1, attempts=2,
        )
        assert OrchestrationResponse.model_validate_json(response.model_dump_json()) == response
