"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

from pythonjsonlogger.json import JsonFormatter

from save_invest.config import settings


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

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_classification(
    request_id: str,
    user_id: str,
    is_necessary: bool,
    source: str,
    warnings: List[str],
) -> None:
    """Log classification outcome; data-quality warnings go out at WARNING"""
    extra = {
        "request_id": request_id,
        "user_id": user_id,
        "step": "classification_complete",
        "outcome": "necessary" if is_necessary else "discretionary",
        "source": source,
    }
    if warnings:
        logging.warning("Classification used sanitized input", extra={**extra, "warnings": warnings})
    else:
        logging.info("Classification completed", extra=extra)


def log_plan(
    request_id: str,
    user_id: str,
    risk_tolerance: str,
    monthly_target: float,
    vehicle_count: int,
    duration_ms: float,
) -> None:
    """Log structured plan outcome for analysis"""
    logging.info(
        "Plan generated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "plan_complete",
            "risk_tolerance": risk_tolerance,
            "monthly_target": monthly_target,
            "vehicle_count": vehicle_count,
            "duration_ms": duration_ms,
        },
    )


def log_store_failure(operation: str, error: Exception, **context: Any) -> None:
    """Storage failures degrade to defaults; record what was lost"""
    logging.warning(
        f"Storage {operation} failed, using fallback: {error}",
        extra={"step": "store_fallback", "operation": operation, **context},
    )
