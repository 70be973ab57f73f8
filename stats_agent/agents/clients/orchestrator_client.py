"""HTTP client for the orchestration service, used by the CLI."""

from stats_agent.agents.clients.base_client import ServiceClient
from stats_agent.errors import CollaboratorError, InvalidRequestError
from stats_agent.schemas import OrchestrationRequest, OrchestrationResponse


class OrchestratorClient(ServiceClient):
    """Calls POST /orchestrate on a running orchestration service.

    A 400 from the service is re-raised as InvalidRequestError so callers
    can tell bad input apart from an unavailable backend.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 330.0,
        http_client=None,
    ) -> None:
        super().__init__(
            "orchestrator", base_url, timeout=timeout, http_client=http_client
        )

    async def orchestrate(self, request: OrchestrationRequest) -> OrchestrationResponse:
        try:
            return await self.post_json("/orchestrate", request, OrchestrationResponse)
        except CollaboratorError as e:
            if e.status_code == 400:
                raise InvalidRequestError(str(e)) from e
            raise
