"""HTTP client for the statistic extraction (synthesis) service."""

from stats_agent.agents.clients.base_client import ServiceClient
from stats_agent.schemas import (
    CandidateStatistic,
    ExtractionRequest,
    ExtractionResponse,
    SourceDocument,
)


class SynthesisServiceClient(ServiceClient):
    """StatisticExtractor backed by the synthesis agent's POST /synthesize."""

    def __init__(self, base_url: str, timeout: float = 45.0, http_client=None) -> None:
        super().__init__("synthesis", base_url, timeout=timeout, http_client=http_client)

    async def extract(
        self,
        topic: str,
        sources: list[SourceDocument],
        min_count: int,
        max_count: int,
    ) -> list[CandidateStatistic]:
        request = ExtractionRequest(
            topic=topic, sources=sources, min=min_count, max=max_count
        )
        response = await self.post_json("/synthesize", request, ExtractionResponse)
        self._logger.debug(
            "candidates_extracted",
            sources_analyzed=response.sources_analyzed,
            candidates=len(response.candidates),
        )
        return response.candidates
