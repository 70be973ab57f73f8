"""Tests for ExcerptClaimVerifier.

Sources are served by httpx.MockTransport; fetch_attempts is kept at 1
unless a test is about retries so no backoff sleeps happen.
"""

import httpx
import pytest

from stats_agent.agents.protocols import ClaimVerifier
from stats_agent.agents.verification import ExcerptClaimVerifier
from stats_agent.agents.verification.excerpt_verifier import MAX_BODY_BYTES
from stats_agent.schemas import CandidateStatistic

PAGES = {
    "/unemployment": "<p>The unemployment rate was 3.9 percent in April.</p>",
    "/inflation": "<p>Prices rose sharply last year.</p>",
}


def candidate(path: str, excerpt: str) -> CandidateStatistic:
    return CandidateStatistic(
        name=f"Statistic from {path}",
        value=3.9,
        unit="%",
        source="BLS",
        source_url=f"https://www.bls.gov{path}",
        excerpt=excerpt,
    )


def serve_pages(request: httpx.Request) -> httpx.Response:
    body = PAGES.get(request.url.path)
    if body is None:
        return httpx.Response(404, text="not found")
    return httpx.Response(200, text=body)


def verifier_for(handler, **kwargs) -> ExcerptClaimVerifier:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kwargs.setdefault("fetch_attempts", 1)
    return ExcerptClaimVerifier(http_client=http, **kwargs)


def test_satisfies_protocol():
    assert isinstance(ExcerptClaimVerifier(), ClaimVerifier)


class TestExcerptClaimVerifier:

    @pytest.mark.asyncio
    async def test_excerpt_found(self):
        verdicts = await verifier_for(serve_pages).verify(
            [candidate("/unemployment", "unemployment rate was 3.9 percent")]
        )

        assert verdicts[0].verified is True
        assert verdicts[0].statistic.verified is True
        assert verdicts[0].reason is None

    @pytest.mark.asyncio
    async def test_excerpt_missing(self):
        verdicts = await verifier_for(serve_pages).verify(
            [candidate("/inflation", "Prices rose 9.1 percent")]
        )

        assert verdicts[0].verified is False
        assert verdicts[0].statistic.verified is False
        assert verdicts[0].reason == "Excerpt not found in source content"

    @pytest.mark.asyncio
    async def test_fetch_failure_is_a_failed_verdict(self):
        verdicts = await verifier_for(serve_pages).verify(
            [candidate("/missing", "anything")]
        )

        assert verdicts[0].verified is False
        assert verdicts[0].reason == "Failed to fetch source: HTTP 404"

    @pytest.mark.asyncio
    async def test_transport_failure_is_a_failed_verdict(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        verdicts = await verifier_for(refuse).verify([candidate("/unemployment", "3.9")])

        assert verdicts[0].verified is False
        assert verdicts[0].reason.startswith("Failed to fetch source:")

    @pytest.mark.asyncio
    async def test_status_errors_not_retried(self):
        calls: list[str] = []

        def handler(request):
            calls.append(str(request.url))
            return httpx.Response(500, text="boom")

        verdicts = await verifier_for(handler, fetch_attempts=3).verify(
            [candidate("/unemployment", "3.9")]
        )

        assert verdicts[0].reason == "Failed to fetch source: HTTP 500"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_order_preserved_for_mixed_batch(self):
        candidates = [
            candidate("/inflation", "Prices rose sharply"),
            candidate("/missing", "x"),
            candidate("/unemployment", "3.9 percent in April"),
            candidate("/inflation", "Prices fell"),
        ]

        verdicts = await verifier_for(serve_pages, concurrency=2).verify(candidates)

        assert [v.statistic.source_url for v in verdicts] == [c.source_url for c in candidates]
        assert [v.verified for v in verdicts] == [True, False, True, False]

    @pytest.mark.asyncio
    async def test_body_truncated_at_limit(self):
        padding = "a" * MAX_BODY_BYTES

        def handler(request):
            return httpx.Response(200, text=padding + "hidden statistic 42")

        verdicts = await verifier_for(handler).verify([candidate("/big", "hidden statistic 42")])

        assert verdicts[0].verified is False

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        assert await verifier_for(serve_pages).verify([]) == []

    @pytest.mark.asyncio
    async def test_malformed_url_is_a_failed_verdict(self):
        bad = candidate("/unemployment", "3.9").model_copy(update={"source_url": "http://[::1"})
        good = candidate("/unemployment", "3.9 percent in April")

        verdicts = await verifier_for(serve_pages).verify([bad, good])

        assert [v.statistic.source_url for v in verdicts] == ["http://[::1", good.source_url]
        assert verdicts[0].verified is False
        assert verdicts[0].reason.startswith("Failed to fetch source:")
        assert verdicts[1].verified is True

    @pytest.mark.asyncio
    async def test_unsupported_protocol_not_retried(self):
        calls: list[str] = []

        def handler(request):
            calls.append(str(request.url))
            raise httpx.UnsupportedProtocol("Request URL has an unsupported protocol 'ftp://'")

        verdicts = await verifier_for(handler, fetch_attempts=3).verify(
            [candidate("/unemployment", "3.9")]
        )

        assert verdicts[0].verified is False
        assert verdicts[0].reason.startswith("Failed to fetch source:")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_is_a_failed_verdict(self):
        def handler(request):
            if request.url.path == "/inflation":
                raise RuntimeError("decoder exploded")
            return serve_pages(request)

        verdicts = await verifier_for(handler).verify([
            candidate("/inflation", "Prices rose sharply"),
            candidate("/unemployment", "3.9 percent in April"),
        ])

        assert verdicts[0].verified is False
        assert verdicts[0].reason == "Failed to verify source: decoder exploded"
        assert verdicts[1].verified is True
