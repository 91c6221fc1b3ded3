import logging
import os
import sys


def setup_logging(level: int | str | None = None) -> None:
    logger = logging.getLogger()
    if logger.handlers:
        return  # already configured (uvicorn, pytest)
    logger.setLevel(level or os.getenv("LOG_LEVEL", "INFO").upper())
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s - %(message)s"
    ))
    logger.addHandler(h)
