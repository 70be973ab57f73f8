"""Pydantic schemas for statistics, collaborator contracts and orchestration.

Usage:
    from stats_agent.schemas import OrchestrationRequest, CandidateStatistic
    request = OrchestrationRequest(topic="climate change", min_verified=10)
"""

from stats_agent.schemas.statistic_schema import (
    CandidateStatistic,
    SourceDocument,
    VerificationVerdict,
    VerifiedStatistic,
)
from stats_agent.schemas.collaborator_schema import (
    DiscoveryRequest,
    DiscoveryResponse,
    ExtractionRequest,
    ExtractionResponse,
    VerificationRequest,
    VerificationResponse,
)
from stats_agent.schemas.orchestration_schema import (
    OrchestrationRequest,
    OrchestrationResponse,
)

__all__ = [
    "CandidateStatistic",
    "SourceDocument",
    "VerificationVerdict",
    "VerifiedStatistic",
    "DiscoveryRequest",
    "DiscoveryResponse",
    "ExtractionRequest",
    "ExtractionResponse",
    "VerificationRequest",
    "VerificationResponse",
    "OrchestrationRequest",
    "OrchestrationResponse",
]
