"""Centralized logging configuration."""
import sys

from loguru import logger

log_format = ' | '.join(
    (
        '<lk>{time:YYYY-MM-DD HH:mm:ss.SSS}</>',
        '<lvl>{level:<8}</>',
        '<c>{name}:{function}:{line}</>',
        '{message}',
    )
)

_configured = False


def setup_logging(level: str = "INFO") -> None:
    global _configured
    if _configured:
        return
    logger.remove()  # drop loguru's default handler, we add our own format
    logger.add(sys.stderr, format=log_format, level=level)
    _configured = True


__all__ = ["logger", "setup_logging"]
