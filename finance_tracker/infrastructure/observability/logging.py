"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from finance_tracker.config import settings


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


def log_bill_payment(
    request_id: str,
    owner_id: int,
    bill_id: int,
    step: str,
    amount: Decimal,
    remaining_amount: Decimal,
    status: str,
    duration_ms: Optional[float] = None,
) -> None:
    """Log a payment or undo against a bill"""
    logging.info(
        "Bill payment updated",
        extra={
            "request_id": request_id,
            "owner_id": owner_id,
            "bill_id": bill_id,
            "step": step,  # payment_applied | payment_reverted | bill_archived
            "amount": str(amount),
            "remaining_amount": str(remaining_amount),
            "bill_status": status,
            "duration_ms": duration_ms,
        },
    )


def log_bill_refresh(request_id: str, owner_id: int, card_count: int, bills_written: int, duration_ms: float) -> None:
    """Log one recomputation of an owner's statements"""
    logging.info(
        "Bills refreshed",
        extra={
            "request_id": request_id,
            "owner_id": owner_id,
            "step": "bill_refresh",
            "card_count": card_count,
            "bills_written": bills_written,
            "duration_ms": duration_ms,
        },
    )
