"""Exception hierarchy for orchestration and collaborator calls.

Only InvalidRequestError, OrchestrationTimeoutError and
CollaboratorUnavailableError reach callers of the engine. Plain
CollaboratorError is raised by the service clients and absorbed by the
orchestration loop.
"""

from typing import Optional


class StatsAgentError(Exception):
    """Base class for all stats_agent errors."""


class InvalidRequestError(StatsAgentError, ValueError):
    """Caller input rejected before any collaborator call."""


class CollaboratorError(StatsAgentError):
    """A collaborator call failed (transport, status or payload).

    Attributes:
        service: Collaborator name (research, synthesis, verification, ...).
        status_code: HTTP status if the service answered, else None.
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class CollaboratorUnavailableError(CollaboratorError):
    """Every orchestration attempt failed at the collaborator level."""

    def __init__(self, last_error: CollaboratorError, attempts: int) -> None:
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            last_error.service,
            f"all {attempts} attempts failed; last error: {last_error}",
            status_code=last_error.status_code,
        )


class OrchestrationTimeoutError(StatsAgentError, TimeoutError):
    """The deadline for a whole orchestration call expired."""


__all__ = [
    "StatsAgentError",
    "InvalidRequestError",
    "CollaboratorError",
    "CollaboratorUnavailableError",
    "OrchestrationTimeoutError",
]
