"""Logging setup shared by the CLI and host applications."""
import logging
from typing import Optional

from recommender_sdk.app.config import Settings, get_settings

ROOT_LOGGER = "recommender_sdk"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Attach stream and file handlers to the SDK's root logger.

    Safe to call more than once; handlers are only added the first time.
    """
    settings = settings or get_settings()
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(settings.log_level.upper())

    if logger.handlers:
        return logger

    formatter = logging.Formatter(_FORMAT)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    settings.log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(settings.log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # Request URLs carry user ids; keep transport chatter out of the logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return logger
