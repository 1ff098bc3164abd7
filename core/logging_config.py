# core/logging_config.py
import logging

from core.config import settings

LOGGER_NAME = "estate_console"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEV_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s"

# Third-party loggers that log every remote request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # Avoid duplicate handlers in dev reload
    if logger.handlers:
        return logger

    logger.setLevel(_resolve_level(settings.LOG_LEVEL))
    logger.propagate = False

    fmt = DEV_LOG_FORMAT if settings.ENV == "development" else LOG_FORMAT
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(stream_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


logger = setup_logger()
