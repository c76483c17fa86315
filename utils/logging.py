import json
import logging
import sys
from datetime import datetime, timezone

from config import settings

ROOT_LOGGER = "imgopt"


class StructuredFormatter(logging.Formatter):
    """One JSON object per line.

    Fields:
    - severity: Python level name
    - logger: Emitting logger, e.g. "imgopt.optimizers"
    - message: Human-readable message
    - timestamp: ISO 8601 with timezone
    - request_id: From log record extras (if available)
    - context: Additional structured data (tool, path, exit code...)
    - error / traceback: When the record carries exception info
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if hasattr(record, "request_id"):
            log_entry["request_id"] = record.request_id

        if hasattr(record, "context"):
            log_entry["context"] = record.context

        if record.exc_info and record.exc_info[0]:
            exc = record.exc_info[1]
            log_entry["error"] = {
                "type": type(exc).__name__,
                "code": getattr(exc, "error_code", None),
                "details": getattr(exc, "details", {}),
            }
            log_entry["traceback"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure structured JSON logging on the imgopt logger tree.

    Call once at application startup (in main.py lifespan).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter())

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, (level or settings.log_level).upper()))

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger under the 'imgopt' namespace."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
