"""Source discovery providers."""

from stats_agent.agents.search.serper_discoverer import SerperSourceDiscoverer

__all__ = ["SerperSourceDiscoverer"]
