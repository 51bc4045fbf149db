"""Structured JSON logging for Versalles."""

import json
import logging
import sys
from datetime import datetime, timezone

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                log_entry[key] = value
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = True) -> None:
    """Configure structured logging for the application.

    Safe to call more than once; the stdout handler is installed a single time.
    """
    root = logging.getLogger("versalles")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = next((h for h in root.handlers if getattr(h, "_versalles", False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler._versalles = True
        root.addHandler(handler)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger scoped under versalles."""
    return logging.getLogger(f"versalles.{name}")
