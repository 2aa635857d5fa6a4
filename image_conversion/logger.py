import logging
import os
import sys

BASE_NAME = "image_conversion"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class _CategoryFilter(logging.Filter):
    """Pass records whose last logger-name segment is in ``allowed``."""

    def __init__(self, allowed: set[str]):
        super().__init__()
        self.allowed = allowed

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.rsplit(".", 1)[-1] in self.allowed


def setup_logger(level: int = logging.INFO, name: str = BASE_NAME) -> logging.Logger:
    """Configure the package logger and return it.

    IMAGE_CONVERSION_LOG_LEVEL overrides ``level``; IMAGE_CONVERSION_LOG_CATS
    (comma separated, e.g. ``pipeline,artifact_store``) limits output to those
    child loggers. Both are re-read on every call.
    """
    logger = logging.getLogger(name)

    env_level = (os.getenv("IMAGE_CONVERSION_LOG_LEVEL") or "").strip().lower()
    logger.setLevel(_LEVELS.get(env_level, level))

    handler = next(
        (
            h
            for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        ),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(stream=sys.stderr)
        logger.addHandler(handler)
    handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S"))

    handler.filters.clear()
    cats = {c.strip() for c in (os.getenv("IMAGE_CONVERSION_LOG_CATS") or "").split(",") if c.strip()}
    if cats:
        handler.addFilter(_CategoryFilter(cats))

    # conversions log under image_conversion.* only
    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = setup_logger()
    return base if not name else base.getChild(name)
