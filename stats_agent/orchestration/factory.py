"""Wire an OrchestrationEngine from Settings.

Provider selection:
- SEARCH_PROVIDER=service -> ResearchServiceClient, serper -> SerperSourceDiscoverer
- VERIFIER=service        -> VerificationServiceClient, excerpt -> ExcerptClaimVerifier
- Statistic extraction always goes through the synthesis service.
"""

from stats_agent.agents.clients import (
    ResearchServiceClient,
    SynthesisServiceClient,
    VerificationServiceClient,
)
from stats_agent.agents.protocols import ClaimVerifier, SourceDiscoverer
from stats_agent.agents.search import SerperSourceDiscoverer
from stats_agent.agents.verification import ExcerptClaimVerifier
from stats_agent.config.settings import Settings
from stats_agent.orchestration.engine import OrchestrationEngine


def build_discoverer(settings: Settings) -> SourceDiscoverer:
    provider = settings.search_provider.lower()
    if provider == "service":
        return ResearchServiceClient(
            settings.research_agent_url, timeout=settings.research_timeout
        )
    if provider == "serper":
        return SerperSourceDiscoverer(
            api_key=settings.serper_api_key, timeout=settings.research_timeout
        )
    raise ValueError(
        f"unsupported search provider: {settings.search_provider} (use 'service' or 'serper')"
    )


def build_verifier(settings: Settings) -> ClaimVerifier:
    verifier = settings.verifier.lower()
    if verifier == "service":
        return VerificationServiceClient(
            settings.verification_agent_url, timeout=settings.verification_timeout
        )
    if verifier == "excerpt":
        return ExcerptClaimVerifier(timeout=settings.verification_timeout)
    raise ValueError(
        f"unsupported verifier: {settings.verifier} (use 'service' or 'excerpt')"
    )


def build_engine(settings: Settings) -> OrchestrationEngine:
    """Create an engine with collaborators chosen by settings.

    Raises:
        ValueError: Unknown provider name or missing provider credentials.
    """
    return OrchestrationEngine(
        discoverer=build_discoverer(settings),
        extractor=SynthesisServiceClient(
            settings.synthesis_agent_url, timeout=settings.synthesis_timeout
        ),
        verifier=build_verifier(settings),
        config=settings.engine_config(),
    )


async def close_engine(engine: OrchestrationEngine) -> None:
    """Close HTTP clients held by the engine's collaborators."""
    for collaborator in (engine.discoverer, engine.extractor, engine.verifier):
        aclose = getattr(collaborator, "aclose", None)
        if aclose is not None:
            await aclose()
