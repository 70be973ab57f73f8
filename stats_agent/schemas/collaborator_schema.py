"""Wire contracts for the three collaborator services.

Each collaborator is an independently owned HTTP/JSON service:

- Source discovery   POST /research    DiscoveryRequest    -> DiscoveryResponse
- Statistic extraction POST /synthesize ExtractionRequest   -> ExtractionResponse
- Claim verification POST /verify      VerificationRequest -> VerificationResponse

Responses are validated on receipt; a payload that does not match its schema
is treated by the orchestrator exactly like a transport failure.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from stats_agent.schemas.statistic_schema import (
    CandidateStatistic,
    SourceDocument,
    VerificationVerdict,
)


class DiscoveryRequest(BaseModel):
    topic: str
    count: int = Field(..., ge=0, description="Number of sources wanted")
    reputable_only: bool = False


class DiscoveryResponse(BaseModel):
    sources: list[SourceDocument] = Field(default_factory=list)
    total: int = 0


class ExtractionRequest(BaseModel):
    topic: str
    sources: list[SourceDocument] = Field(default_factory=list)
    min: int = Field(..., ge=0, description="Minimum candidates to extract")
    max: int = Field(..., ge=0, description="Maximum candidates to extract")


class ExtractionResponse(BaseModel):
    candidates: list[CandidateStatistic] = Field(default_factory=list)
    sources_analyzed: int = 0


class VerificationRequest(BaseModel):
    candidates: list[CandidateStatistic] = Field(default_factory=list)


class VerificationResponse(BaseModel):
    results: list[VerificationVerdict] = Field(default_factory=list)
    verified_count: int = 0
    failed_count: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
