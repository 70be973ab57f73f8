"""HTTP client for the claim verification service."""

from stats_agent.agents.clients.base_client import ServiceClient
from stats_agent.errors import CollaboratorError
from stats_agent.schemas import (
    CandidateStatistic,
    VerificationRequest,
    VerificationResponse,
    VerificationVerdict,
)


class VerificationServiceClient(ServiceClient):
    """ClaimVerifier backed by the verification agent's POST /verify."""

    def __init__(self, base_url: str, timeout: float = 60.0, http_client=None) -> None:
        super().__init__(
            "verification", base_url, timeout=timeout, http_client=http_client
        )

    async def verify(
        self,
        candidates: list[CandidateStatistic],
    ) -> list[VerificationVerdict]:
        if not candidates:
            return []
        request = VerificationRequest(candidates=candidates)
        response = await self.post_json("/verify", request, VerificationResponse)

        # One verdict per candidate, otherwise verdicts cannot be attributed
        if len(response.results) != len(candidates):
            raise CollaboratorError(
                self.service,
                f"malformed response: {len(response.results)} verdicts "
                f"for {len(candidates)} candidates",
            )
        return response.results
