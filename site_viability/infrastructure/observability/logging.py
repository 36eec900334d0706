"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

from site_viability.config import settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_analysis(
    request_id: str,
    business_category: str,
    viability_score: int,
    verdict: str,
    cache_hit: bool,
    timings_ms: Dict[str, int],
) -> None:
    """Log structured analysis outcome"""
    logging.getLogger("site_viability.analysis").info(
        "Analysis completed",
        extra={
            "request_id": request_id,
            "step": "analysis_complete",
            "business_category": business_category,
            "viability_score": viability_score,
            "verdict": verdict,
            "cache_hit": cache_hit,
            "timings_ms": timings_ms,
        },
    )
