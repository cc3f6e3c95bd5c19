"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from kobi_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
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


def log_score_computed(
    request_id: str,
    profile_id: str,
    cached: bool,
    total_score: float,
    assessment_source: str,
    duration_ms: float,
) -> None:
    """Log structured scoring outcome for analysis"""
    logging.info(
        "Score completed",
        extra={
            "request_id": request_id,
            "profile_id": profile_id,
            "step": "score_complete",
            "cached": cached,
            "total_score": total_score,
            "assessment_source": assessment_source,
            "duration_ms": duration_ms,
        },
    )


def log_eligibility(request_id: str, profile_id: str, offer_id: str, status: str) -> None:
    """Log structured eligibility outcome"""
    logging.info(
        "Eligibility checked",
        extra={
            "request_id": request_id,
            "profile_id": profile_id,
            "offer_id": offer_id,
            "step": "eligibility_complete",
            "eligibility_status": status,
        },
    )
