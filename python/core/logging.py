"""
Logging setup for the booking API.

One stdout handler on the root logger. Level names are colored only when
stdout is a terminal, so container logs stay plain text.
"""

import logging
import sys
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"

# client libraries that log every HTTP call or SMTP exchange at INFO
QUIET_LOGGERS = (
    "httpx",
    "httpcore",
    "uvicorn.access",
    "aiosmtplib",
    "urllib3",
    "PIL",
)

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


class ColoredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname)
        if color is None:
            return super().format(record)
        plain = record.levelname
        record.levelname = f"{color}{plain}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def build_formatter(use_colors: Optional[bool] = None) -> logging.Formatter:
    """Colored formatter on a terminal, plain otherwise (or as forced by use_colors)."""
    if use_colors is None:
        use_colors = sys.stdout.isatty()
    cls = ColoredFormatter if use_colors else logging.Formatter
    return cls(LOG_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(
    debug: bool = False,
    use_colors: Optional[bool] = None,
    quiet: Iterable[str] = QUIET_LOGGERS,
) -> None:
    """
    Configure the root logger.

    Args:
        debug: DEBUG level instead of INFO (the DEBUG setting)
        use_colors: Force colors on or off; None detects a terminal
        quiet: Loggers held at WARNING
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(use_colors))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    root.handlers = [handler]

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_error(logger: logging.Logger, error: Exception, context: Optional[str] = None) -> None:
    """Log an unexpected exception with its traceback, prefixed by e.g. "GET /api/gyms"."""
    msg = f"{type(error).__name__}: {error}"
    if context:
        msg = f"[{context}] {msg}"
    logger.error(msg, exc_info=error)
