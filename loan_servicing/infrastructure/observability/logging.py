"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from loan_servicing.config import settings


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


def log_loan_created(
    request_id: str,
    loan_id: str,
    manager_id: str,
    principal: float,
    total_amount: float,
    installment_count: int,
    duration_ms: float,
) -> None:
    """Log structured loan creation outcome"""
    logging.info(
        "Loan created",
        extra={
            "request_id": request_id,
            "loan_id": loan_id,
            "manager_id": manager_id,
            "step": "loan_created",
            "principal": principal,
            "total_amount": total_amount,
            "installment_count": installment_count,
            "duration_ms": duration_ms,
        },
    )


def log_payment_recorded(
    request_id: str,
    loan_id: str,
    installment_number: int,
    amount: float,
    installment_status: str,
    loan_status: str,
) -> None:
    """Log structured payment outcome"""
    logging.info(
        "Payment recorded",
        extra={
            "request_id": request_id,
            "loan_id": loan_id,
            "installment_number": installment_number,
            "step": "payment_recorded",
            "amount": amount,
            "installment_status": installment_status,
            "loan_status": loan_status,
        },
    )


def log_daily_closure_recorded(
    request_id: str,
    closure_id: str,
    manager_id: str,
    closure_date: str,
    total_collected: float,
    total_expenses: float,
    net_amount: float,
) -> None:
    """Log structured daily closure outcome"""
    logging.info(
        "Daily closure recorded",
        extra={
            "request_id": request_id,
            "closure_id": closure_id,
            "manager_id": manager_id,
            "step": "daily_closure_recorded",
            "closure_date": closure_date,
            "total_collected": total_collected,
            "total_expenses": total_expenses,
            "net_amount": net_amount,
        },
    )
