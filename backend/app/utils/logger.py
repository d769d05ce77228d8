"""Structured logging configuration."""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic_settings import BaseSettings


# Extra fields copied from `logger.x(..., extra={...})` into the JSON record
EXTRA_FIELDS = (
    "document_name",
    "documents_count",
    "pairs_compared",
    "pairs_flagged",
    "similarity_score",
    "processing_time_seconds",
    "error_code",
)


class LogSettings(BaseSettings):
    """Logging configuration settings."""

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logger() -> logging.Logger:
    """Configure structured JSON logging."""
    settings = LogSettings()

    logger = logging.getLogger("plagiarism_checker")
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

    return logger


# Global logger instance
logger = setup_logger()
