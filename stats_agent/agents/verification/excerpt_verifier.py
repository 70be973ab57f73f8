"""In-process claim verification by verbatim excerpt match.

Alternative to the verification service. For each candidate:
1. Fetch source_url (retrying transient transport errors with backoff)
2. Mark verified iff the candidate's excerpt appears verbatim in the body

A source that cannot be fetched (bad URL, transport error, error status)
yields a failed verdict with a reason, not an exception: one dead link must
not sink the whole batch. Candidates are checked concurrently, bounded by
a semaphore; verdict order matches input order.

Usage:
    from stats_agent.agents.verification import ExcerptClaimVerifier

    async with ExcerptClaimVerifier() as verifier:
        verdicts = await verifier.verify(candidates)
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stats_agent.agents.clients.base_client import USER_AGENT
from stats_agent.schemas import (
    CandidateStatistic,
    VerificationVerdict,
    VerifiedStatistic,
)

# Bodies larger than this are truncated before matching
MAX_BODY_BYTES = 10 * 1024 * 1024


class ExcerptClaimVerifier:
    """ClaimVerifier that re-fetches each source and looks for the excerpt."""

    def __init__(
        self,
        timeout: float = 30.0,
        concurrency: int = 5,
        fetch_attempts: int = 3,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize ExcerptClaimVerifier.

        Args:
            timeout: Per-fetch timeout in seconds.
            concurrency: Maximum sources fetched at once.
            fetch_attempts: Attempts per URL on transport errors.
            http_client: Optional shared httpx client (caller closes it).
        """
        self.timeout = timeout
        self.concurrency = concurrency
        self.fetch_attempts = fetch_attempts
        self._http_client = http_client
        self._owns_client = http_client is None
        self._logger = structlog.get_logger().bind(component="ExcerptClaimVerifier")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            )
            self._owns_client = True
        return self._http_client

    async def verify(
        self,
        candidates: list[CandidateStatistic],
    ) -> list[VerificationVerdict]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def verify_with_semaphore(candidate: CandidateStatistic) -> VerificationVerdict:
            async with semaphore:
                try:
                    return await self._verify_one(candidate)
                except Exception as e:
                    self._logger.error(
                        "candidate_verification_failed",
                        source_url=candidate.source_url,
                        error=str(e),
                    )
                    return self._verdict(candidate, False, f"Failed to verify source: {e}")

        raw_results = await asyncio.gather(
            *[verify_with_semaphore(c) for c in candidates],
            return_exceptions=True,
        )

        verdicts: list[VerificationVerdict] = []
        for candidate, result in zip(candidates, raw_results):
            if isinstance(result, VerificationVerdict):
                verdicts.append(result)
            elif isinstance(result, Exception):
                self._logger.error("batch_exception", error=str(result))
                verdicts.append(
                    self._verdict(candidate, False, f"Failed to verify source: {result}")
                )
            else:
                raise result

        verified = sum(1 for v in verdicts if v.verified)
        self._logger.info(
            "batch_verified",
            candidates=len(candidates),
            verified=verified,
            failed=len(candidates) - verified,
        )
        return verdicts

    async def _verify_one(self, candidate: CandidateStatistic) -> VerificationVerdict:
        try:
            body = await self._fetch_with_retry(candidate.source_url)
        except httpx.HTTPStatusError as e:
            return self._verdict(
                candidate, False, f"Failed to fetch source: HTTP {e.response.status_code}"
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._verdict(candidate, False, f"Failed to fetch source: {e}")

        if candidate.excerpt and candidate.excerpt in body:
            return self._verdict(candidate, True, None)

        self._logger.debug("excerpt_not_found", source_url=candidate.source_url)
        return self._verdict(candidate, False, "Excerpt not found in source content")

    async def _fetch_with_retry(self, url: str) -> str:
        """Fetch URL text, retrying transport errors with exponential backoff.

        HTTP status errors and unsupported URL schemes are not retried.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.fetch_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=(
                retry_if_exception_type(httpx.TransportError)
                & retry_if_not_exception_type(httpx.UnsupportedProtocol)
            ),
            reraise=True,
        ):
            with attempt:
                return await self._fetch(url)
        raise RuntimeError("unreachable")  # pragma: no cover

    async def _fetch(self, url: str) -> str:
        client = self._get_http_client()
        async with client.stream("GET", url, timeout=self.timeout) as response:
            response.raise_for_status()
            chunks: list[bytes] = []
            size = 0
            async for chunk in response.aiter_bytes():
                chunks.append(chunk)
                size += len(chunk)
                if size >= MAX_BODY_BYTES:
                    break
            body = b"".join(chunks)[:MAX_BODY_BYTES]
            return body.decode(response.encoding or "utf-8", errors="replace")

    @staticmethod
    def _verdict(
        candidate: CandidateStatistic,
        verified: bool,
        reason: Optional[str],
    ) -> VerificationVerdict:
        statistic = VerifiedStatistic.from_candidate(
            candidate, verified=verified, date_found=datetime.now(timezone.utc)
        )
        return VerificationVerdict(statistic=statistic, verified=verified, reason=reason)
