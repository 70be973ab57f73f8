"""Capability interfaces for the three orchestration collaborators.

The engine depends only on these protocols. Provider-specific
implementations (HTTP service clients, Serper search, in-process excerpt
verification) are injected at construction.

Implementations signal failure by raising CollaboratorError. Any other
exception is treated as a bug and propagates out of the engine.
"""

from typing import Protocol, runtime_checkable

from stats_agent.schemas import (
    CandidateStatistic,
    SourceDocument,
    VerificationVerdict,
)


@runtime_checkable
class SourceDiscoverer(Protocol):
    """Find candidate source documents for a topic."""

    async def discover(
        self,
        topic: str,
        count: int,
        reputable_only: bool = False,
    ) -> list[SourceDocument]:
        ...


@runtime_checkable
class StatisticExtractor(Protocol):
    """Extract candidate statistics from source documents."""

    async def extract(
        self,
        topic: str,
        sources: list[SourceDocument],
        min_count: int,
        max_count: int,
    ) -> list[CandidateStatistic]:
        ...


@runtime_checkable
class ClaimVerifier(Protocol):
    """Confirm each candidate's excerpt against its source.

    Returns exactly one verdict per candidate, in input order.
    """

    async def verify(
        self,
        candidates: list[CandidateStatistic],
    ) -> list[VerificationVerdict]:
        ...
