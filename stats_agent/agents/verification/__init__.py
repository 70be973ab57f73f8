"""Claim verification providers."""

from stats_agent.agents.verification.excerpt_verifier import ExcerptClaimVerifier

__all__ = ["ExcerptClaimVerifier"]
