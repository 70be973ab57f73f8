"""Orchestration request/response schemas.

OrchestrationRequest is frozen: once a run starts, the request is never
mutated. A continuation round derives a new request with model_copy().

OrchestrationResponse is the only artifact returned to callers. Its counters
are derived from the statistics list, so a response can never claim more
verified statistics than it carries.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from stats_agent.schemas.statistic_schema import VerifiedStatistic


class OrchestrationRequest(BaseModel):
    """Request to find verified statistics on a topic.

    Input is not range-checked here; the engine rejects bad input with
    InvalidRequestError.

    Attributes:
        topic: Topic to research (non-empty).
        min_verified: Target number of verified statistics (>= 1).
            Wire name: ``min_verified_stats``.
        max_candidates: Ceiling on candidates gathered over all attempts.
            None or 0 means 3 x min_verified.
        reputable_only: Restrict discovery to reputable sources.
    """

    topic: str = ""
    min_verified: int = Field(default=0, alias="min_verified_stats")
    max_candidates: Optional[int] = None
    reputable_only: bool = False

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "topic": "climate change",
                    "min_verified_stats": 10,
                    "max_candidates": 30,
                    "reputable_only": True,
                }
            ]
        },
    }


class OrchestrationResponse(BaseModel):
    """Final result of one (or several merged) orchestration runs.

    partial is True iff verified_count < target_count.
    """

    topic: str
    statistics: list[VerifiedStatistic] = Field(default_factory=list)
    total_candidates: int = Field(default=0, ge=0)
    verified_count: int = Field(default=0, ge=0)
    failed_count: int = Field(default=0, ge=0)
    partial: bool = False
    target_count: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    attempts: int = Field(default=0, ge=0, description="Loop iterations used")

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def derive_counts(cls, data: dict) -> dict:
        """Fill verified_count and partial from the statistics list if missing."""
        if isinstance(data, dict):
            data = dict(data)
            statistics = data.get("statistics") or []
            if data.get("verified_count") is None:
                data["verified_count"] = len(statistics)
            if data.get("partial") is None:
                data["partial"] = data["verified_count"] < data.get("target_count", 0)
        return data

    @model_validator(mode="after")
    def check_invariants(self) -> "OrchestrationResponse":
        if self.verified_count != len(self.statistics):
            raise ValueError(
                f"verified_count={self.verified_count} but "
                f"{len(self.statistics)} statistics present"
            )
        if any(not stat.verified for stat in self.statistics):
            raise ValueError("response contains an unverified statistic")
        if self.partial != (self.verified_count < self.target_count):
            raise ValueError("partial must equal verified_count < target_count")
        return self
