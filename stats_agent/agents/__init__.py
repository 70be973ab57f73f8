"""Collaborator capabilities and their provider implementations."""

from stats_agent.agents.protocols import (
    ClaimVerifier,
    SourceDiscoverer,
    StatisticExtractor,
)

__all__ = ["ClaimVerifier", "SourceDiscoverer", "StatisticExtractor"]
