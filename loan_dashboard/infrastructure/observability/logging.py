"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Iterable

from pythonjsonlogger import jsonlogger

from loan_dashboard.config import settings


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

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_query(
    request_id: str,
    endpoint: str,
    tables: Iterable[str],
    row_count: int,
    duration_ms: float,
) -> None:
    """Log structured outcome of a reporting request"""
    logging.info(
        "Query completed",
        extra={
            "request_id": request_id,
            "step": "query_complete",
            "endpoint": endpoint,
            "source_tables": list(tables),
            "row_count": row_count,
            "duration_ms": round(duration_ms, 2),
        },
    )
