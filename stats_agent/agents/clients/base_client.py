"""Shared async HTTP/JSON client for collaborator services.

Every failure mode of a collaborator call is mapped to CollaboratorError:

- transport errors and timeouts (httpx.TransportError)
- non-2xx responses
- bodies that are not JSON or do not match the response schema

asyncio.CancelledError is never caught, so cancelling the caller aborts the
in-flight request.
"""

from typing import Optional, Type, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from stats_agent.errors import CollaboratorError

ResponseT = TypeVar("ResponseT", bound=BaseModel)

USER_AGENT = "StatsAgentTeam/0.1 (+https://github.com/grokify/stats-agent-team)"


class ServiceClient:
    """Base class for JSON services reached over HTTP POST.

    Usable as an async context manager, or with an externally owned
    httpx.AsyncClient (which the caller closes).

    Attributes:
        service: Collaborator name used in errors and logs
        base_url: Service base URL (no trailing slash)
        timeout: Per-call timeout in seconds
    """

    def __init__(
        self,
        service: str,
        base_url: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.service = service
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None
        self._logger = structlog.get_logger().bind(component=type(self).__name__)

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy-init the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},
            )
            self._owns_client = True
        return self._http_client

    async def __aenter__(self):
        self._get_http_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def post_json(
        self,
        path: str,
        payload: BaseModel,
        response_model: Type[ResponseT],
    ) -> ResponseT:
        """POST a model as JSON and parse the response into response_model.

        Raises:
            CollaboratorError: On any transport, status or payload failure.
        """
        url = f"{self.base_url}{path}"
        client = self._get_http_client()
        try:
            response = await client.post(
                url,
                json=payload.model_dump(mode="json", by_alias=True),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            self._logger.warning("collaborator_timeout", service=self.service, url=url)
            raise CollaboratorError(self.service, f"timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            self._logger.warning(
                "collaborator_unreachable", service=self.service, url=url, error=str(e)
            )
            raise CollaboratorError(self.service, f"request failed: {e}") from e

        if not response.is_success:
            self._logger.warning(
                "collaborator_bad_status",
                service=self.service,
                url=url,
                status_code=response.status_code,
            )
            raise CollaboratorError(
                self.service,
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return response_model.model_validate_json(response.content)
        except ValidationError as e:
            self._logger.warning(
                "collaborator_malformed_response",
                service=self.service,
                url=url,
                errors=e.error_count(),
            )
            raise CollaboratorError(self.service, f"malformed response: {e}") from e
