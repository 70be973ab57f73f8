"""Statistics agent team: find and verify numerical statistics on a topic."""

__version__ = "0.1.0"
