"""Logging configuration helpers."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Attach one stream handler to the package logger and set its level.

    Repeated calls only update the level.
    """
    logger = logging.getLogger("face_attendance")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
