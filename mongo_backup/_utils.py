import logging
import os
import sys
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

logger = logging.getLogger("mongo-backup")

LOG_FORMAT = '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def configure_logging(level: str = "INFO", stream=None) -> logging.Logger:
    """Attach an app-managed console handler to the package logger.

    The handler writes to stdout and the logger does not propagate, so the
    output is the same whether or not the host application configured the
    root logger. Set DISABLE_APP_LOGGING=true to leave configuration to the
    host instead.
    """
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()

    if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
        logger.propagate = True
        return logger

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(console_handler)
    return logger


def mask_url(url: Optional[str]) -> str:
    """Hide the password of a connection URL for logging."""
    if not url:
        return ""
    parts = urlsplit(url)
    if parts.password is None:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":****@", 1)
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
