import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "urllib3")


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for the engine.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR). Unknown names fall back to INFO.
    """
    log_level = logging.getLevelName((level or "INFO").upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("infographix").setLevel(log_level)

    logging.getLogger(__name__).info(f"Logging configured at {logging.getLevelName(log_level)} level")
