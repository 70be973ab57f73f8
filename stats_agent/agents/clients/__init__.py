"""HTTP clients for the collaborator services and the orchestrator."""

from stats_agent.agents.clients.base_client import ServiceClient
from stats_agent.agents.clients.orchestrator_client import OrchestratorClient
from stats_agent.agents.clients.research_client import ResearchServiceClient
from stats_agent.agents.clients.synthesis_client import SynthesisServiceClient
from stats_agent.agents.clients.verification_client import VerificationServiceClient

__all__ = [
    "ServiceClient",
    "OrchestratorClient",
    "ResearchServiceClient",
    "SynthesisServiceClient",
    "VerificationServiceClient",
]
