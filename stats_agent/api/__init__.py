"""HTTP surface of the orchestration service."""

from stats_agent.api.server import app, create_app

__all__ = ["app", "create_app"]
