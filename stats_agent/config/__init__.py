"""Configuration: environment settings, logging and the reputable source list."""
