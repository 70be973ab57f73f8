"""Command-line interface for the Statistics Agent."""
