"""Logging configuration using loguru with automatic dev/prod detection."""

import sys
from loguru import logger

from stats_agent.config.settings import settings


def configure_logging(level: str | None = None) -> None:
    """
    Configure loguru based on environment settings.

    Behavior:
    - Development (TTY + console format): Colorized, human-readable output
    - Production (non-TTY or json format): JSON-structured logs to stdout

    Args:
        level: Override for LOG_LEVEL (e.g. DEBUG from a --verbose flag)
    """
    logger.remove()

    is_tty = sys.stderr.isatty()
    use_console_format = settings.log_format.lower() == "console"
    log_level = (level or settings.log_level).upper()

    if is_tty and use_console_format:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[component]}</cyan> | <level>{message}</level>",
            level=log_level,
            colorize=True,
        )
    else:
        # Keep stdout free for command output; logs go to stderr as JSON
        logger.add(
            sys.stderr,
            format="{message}",
            level=log_level,
            serialize=True,
            diagnose=False,
        )


def get_logger(component: str):
    """
    Get a logger instance bound to a specific component name.

    Example:
        >>> log = get_logger("cli")
        >>> log.info("Searching statistics")
    """
    return logger.bind(component=component)


configure_logging()

__all__ = ["logger", "get_logger", "configure_logging"]
