import sys
from loguru import logger
from .config import settings


def setup_logging():
    """
    Configure the global loguru logger.

    Replaces the default handler with a single stderr sink at LOG_LEVEL.
    Set LOG_JSON=true to emit one JSON document per record (for log shippers).
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        serialize=settings.log_json,
        backtrace=False,
        diagnose=settings.app_env == "dev",
    )
    logger.info("Logging configured", level=settings.log_level.upper(), json=settings.log_json)
    return logger
