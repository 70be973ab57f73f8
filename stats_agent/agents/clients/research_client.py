"""HTTP client for the source discovery (research) service."""

from stats_agent.agents.clients.base_client import ServiceClient
from stats_agent.schemas import DiscoveryRequest, DiscoveryResponse, SourceDocument


class ResearchServiceClient(ServiceClient):
    """SourceDiscoverer backed by the research agent's POST /research."""

    def __init__(self, base_url: str, timeout: float = 30.0, http_client=None) -> None:
        super().__init__("research", base_url, timeout=timeout, http_client=http_client)

    async def discover(
        self,
        topic: str,
        count: int,
        reputable_only: bool = False,
    ) -> list[SourceDocument]:
        request = DiscoveryRequest(topic=topic, count=count, reputable_only=reputable_only)
        response = await self.post_json("/research", request, DiscoveryResponse)
        self._logger.debug(
            "sources_discovered",
            topic=topic[:80],
            requested=count,
            returned=len(response.sources),
        )
        return response.sources
