"""In-process source discovery using the Serper web search API.

Alternative to the research service: queries Serper directly and converts
organic results to SourceDocument objects. When reputable_only is set,
results are filtered through the reputable source allow-list; Serper is
asked for twice as many results to leave room for the filter.

Usage:
    from stats_agent.agents.search import SerperSourceDiscoverer

    async with SerperSourceDiscoverer(api_key="...") as discoverer:
        sources = await discoverer.discover("climate change", count=10)
"""

import os
from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from stats_agent.config.reputable_sources import is_reputable, normalize_domain
from stats_agent.errors import CollaboratorError
from stats_agent.schemas import SourceDocument

SERPER_SEARCH_URL = "https://google.serper.dev/search"

# Serper caps results per query
MAX_RESULTS_PER_QUERY = 100


def _as_position(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


class SerperSourceDiscoverer:
    """SourceDiscoverer backed by Serper (Google search results)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
        search_url: str = SERPER_SEARCH_URL,
    ) -> None:
        """Initialize SerperSourceDiscoverer.

        Args:
            api_key: SERPER_API_KEY. Falls back to env var if not provided.
            timeout: Per-call timeout in seconds.
            http_client: Optional shared httpx client (caller closes it).
            search_url: Serper endpoint, overridable for tests.

        Raises:
            ValueError: If no API key is available.
        """
        self._api_key = api_key or os.environ.get("SERPER_API_KEY")
        if not self._api_key:
            raise ValueError("SERPER_API_KEY is required when using the serper provider")
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None
        self._search_url = search_url
        self._logger = structlog.get_logger().bind(component="SerperSourceDiscoverer")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._http_client

    @staticmethod
    def build_query(topic: str) -> str:
        """Bias the search towards pages that carry numbers."""
        return f"{topic} statistics data research study"

    async def discover(
        self,
        topic: str,
        count: int,
        reputable_only: bool = False,
    ) -> list[SourceDocument]:
        if count <= 0:
            return []

        num = min(count * 2 if reputable_only else count, MAX_RESULTS_PER_QUERY)
        payload = {"q": self.build_query(topic), "num": num, "gl": "us", "hl": "en"}

        try:
            response = await self._get_http_client().post(
                self._search_url,
                json=payload,
                headers={"X-API-KEY": self._api_key},
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise CollaboratorError(
                "serper",
                f"HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise CollaboratorError("serper", f"request failed: {e}") from e
        except ValueError as e:
            raise CollaboratorError("serper", f"malformed response: {e}") from e
        if not isinstance(data, dict):
            raise CollaboratorError("serper", "malformed response: expected an object")

        organic = data.get("organic") or []
        if not isinstance(organic, list):
            raise CollaboratorError("serper", "malformed response: organic is not a list")
        try:
            sources = self._to_sources(organic, reputable_only)[:count]
        except ValidationError as e:
            raise CollaboratorError("serper", f"malformed response: {e}") from e

        self._logger.info(
            "search_executed",
            query=payload["q"][:80],
            requested=count,
            results=len(sources),
            reputable_only=reputable_only,
        )
        return sources

    def _to_sources(
        self,
        organic: list[Any],
        reputable_only: bool,
    ) -> list[SourceDocument]:
        sources: list[SourceDocument] = []
        seen_urls: set[str] = set()

        for result in organic:
            if not isinstance(result, dict):
                continue
            url = result.get("link")
            if not isinstance(url, str) or not url or url in seen_urls:
                continue
            seen_urls.add(url)

            domain = normalize_domain(url)
            if reputable_only and not is_reputable(domain):
                continue

            sources.append(
                SourceDocument(
                    url=url,
                    title=result.get("title") or "",
                    snippet=result.get("snippet") or "",
                    domain=domain,
                    position=_as_position(result.get("position")),
                )
            )
        return sources
