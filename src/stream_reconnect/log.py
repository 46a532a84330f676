from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
HANDLER_NAME = "stream_reconnect.stderr"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a plain stderr handler to the package logger once."""
    logger = logging.getLogger("stream_reconnect")
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)
    if not any(handler.get_name() == HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
