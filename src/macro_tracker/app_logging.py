"""Logging configuration helpers."""

import logging

APP_LOGGER = "macro_tracker"

# httpx logs request URLs at INFO, and Gemini calls carry the API key in the query
QUIET_LOGGERS = ("httpx", "httpcore")


def resolve_level(raw: str | int | None) -> int:
    """Map a level name such as ``"debug"`` to its numeric value."""
    if isinstance(raw, int):
        return raw
    if not raw:
        return logging.INFO
    return logging.getLevelNamesMapping().get(raw.strip().upper(), logging.INFO)


def configure_logging(level: str | int | None = None) -> None:
    """Configure the application logger with a single stream handler."""
    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(resolve_level(level))
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
