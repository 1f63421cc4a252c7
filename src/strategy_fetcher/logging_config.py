"""Process-wide logging setup for the fetcher service."""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s:%(lineno)d %(message)s"
DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


class _UTCFormatter(logging.Formatter):
    converter = time.gmtime


def configure_logging(level: str | int = "INFO", log_file: Path | None = None) -> logging.Logger:
    """Send package logs to stdout and, when given, append them to ``log_file``.

    Raises :class:`OSError` when the log file cannot be opened; the service
    must not start without its log.
    """

    formatter = _UTCFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    root = logging.getLogger("strategy_fetcher")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    return root
