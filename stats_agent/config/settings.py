"""Application settings using Pydantic BaseSettings for environment variable management."""

from pydantic import Field
from pydantic_settings import BaseSettings

from stats_agent.orchestration.config import EngineConfig


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables or a .env file.

    The orchestration engine never reads these directly: engine_config()
    turns them into an immutable EngineConfig that is passed to the engine
    constructor.

    Attributes:
        research_agent_url: Base URL of the source discovery service
        synthesis_agent_url: Base URL of the statistic extraction service
        verification_agent_url: Base URL of the claim verification service
        orchestrator_url: Base URL of the orchestration service (CLI target)
        search_provider: "service" (research agent) or "serper" (in-process)
        serper_api_key: Serper API key, required for search_provider=serper
        verifier: "service" (verification agent) or "excerpt" (in-process)
        research_timeout: Per-call timeout for source discovery, seconds
        synthesis_timeout: Per-call timeout for statistic extraction, seconds
        verification_timeout: Per-call timeout for claim verification, seconds
        orchestrator_timeout: Timeout for CLI calls to the orchestrator, seconds
        orchestration_deadline: Server-side deadline for one orchestration, seconds
        max_retries: Orchestration attempt ceiling
        min_batch: Minimum candidates requested per attempt
        lookahead_margin: Extra sources/candidates requested per attempt
        dedupe_candidates: De-duplicate candidates by (source_url, excerpt)
        fail_on_total_outage: Raise when every attempt fails at the collaborator level
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
    """

    research_agent_url: str = Field(
        default="http://localhost:8001",
        description="Source discovery (research agent) base URL",
    )
    synthesis_agent_url: str = Field(
        default="http://localhost:8004",
        description="Statistic extraction (synthesis agent) base URL",
    )
    verification_agent_url: str = Field(
        default="http://localhost:8002",
        description="Claim verification agent base URL",
    )
    orchestrator_url: str = Field(
        default="http://localhost:8000",
        description="Orchestration service base URL",
    )
    search_provider: str = Field(
        default="service",
        description="Source discovery provider: service or serper",
    )
    serper_api_key: str | None = Field(
        default=None,
        description="Serper.dev API key",
    )
    verifier: str = Field(
        default="service",
        description="Claim verifier: service or excerpt",
    )
    research_timeout: float = Field(default=30.0, gt=0)
    synthesis_timeout: float = Field(default=45.0, gt=0)
    verification_timeout: float = Field(default=60.0, gt=0)
    orchestrator_timeout: float = Field(default=330.0, gt=0)
    orchestration_deadline: float = Field(default=300.0, gt=0)
    max_retries: int = Field(default=3, ge=1)
    min_batch: int = Field(default=5, ge=1)
    lookahead_margin: int = Field(default=5, ge=0)
    dedupe_candidates: bool = False
    fail_on_total_outage: bool = True
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: json or console"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def engine_config(self) -> EngineConfig:
        """Build the immutable engine configuration from these settings."""
        return EngineConfig(
            max_retries=self.max_retries,
            min_batch=self.min_batch,
            lookahead_margin=self.lookahead_margin,
            dedupe_candidates=self.dedupe_candidates,
            fail_on_total_outage=self.fail_on_total_outage,
        )


# Singleton instance for the CLI and HTTP entry points
settings = Settings()
