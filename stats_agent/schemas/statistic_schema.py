"""Statistic schemas shared by every collaborator and the orchestrator.

A statistic moves through three shapes during one orchestration run:

1. SourceDocument - a web page found by source discovery.
2. CandidateStatistic - an unverified numeric claim extracted from a source.
3. VerifiedStatistic - a candidate after claim verification, stamped with
   the verdict and the time it was found.

Candidates are ephemeral: they live for one orchestration run and are never
persisted. Only VerifiedStatistic entries with verified=True are returned to
callers.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class SourceDocument(BaseModel):
    """A candidate source returned by source discovery."""

    url: str = Field(..., description="URL of the source document")
    title: str = Field(default="", description="Page title")
    snippet: str = Field(default="", description="Search snippet")
    domain: str = Field(default="", description="Domain, e.g. 'pewresearch.org'")
    position: Optional[int] = Field(
        default=None, description="Rank in the search results (1-based)"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://www.pewresearch.org/short-reads/2024/teens-social-media/",
                    "title": "Teens, Social Media and Technology 2024",
                    "snippet": "Roughly half of U.S. teens say they are online almost constantly.",
                    "domain": "pewresearch.org",
                    "position": 1,
                }
            ]
        }
    }


class CandidateStatistic(BaseModel):
    """An unverified numeric claim with source attribution."""

    name: str = Field(..., description="Short description of the statistic")
    value: float = Field(..., description="Numerical value")
    unit: str = Field(default="", description="Unit of measurement (%, million, C)")
    source: str = Field(default="", description="Source organisation name")
    source_url: str = Field(..., description="URL the statistic was taken from")
    excerpt: str = Field(
        default="", description="Verbatim quote containing the statistic"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Global temperature increase since 1880",
                    "value": 1.1,
                    "unit": "degrees Celsius",
                    "source": "NASA",
                    "source_url": "https://climate.nasa.gov/vital-signs/global-temperature/",
                    "excerpt": "The planet's average surface temperature has risen about 1.1 degrees Celsius",
                }
            ]
        }
    }

    def is_checkable(self) -> bool:
        """True if the candidate can be confirmed against its source.

        A zero value or a blank excerpt gives the verifier nothing to match.
        """
        return self.value != 0 and bool(self.excerpt.strip())

    def dedupe_key(self) -> tuple[str, str]:
        """Identity used when de-duplicating candidates within a run."""
        return (self.source_url, self.excerpt)


class VerifiedStatistic(CandidateStatistic):
    """A candidate statistic after claim verification."""

    verified: bool = Field(
        default=False, description="True if the excerpt was found in the source"
    )
    date_found: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the statistic was verified",
    )

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateStatistic,
        verified: bool,
        date_found: Optional[datetime] = None,
    ) -> "VerifiedStatistic":
        """Stamp a candidate with a verification outcome."""
        data = candidate.model_dump()
        data["verified"] = verified
        if date_found is not None:
            data["date_found"] = date_found
        return cls(**data)


class VerificationVerdict(BaseModel):
    """Verdict for a single candidate returned by claim verification."""

    statistic: VerifiedStatistic
    verified: bool
    reason: Optional[str] = Field(
        default=None, description="Why verification failed, if it did"
    )
