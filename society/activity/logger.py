"""
Activity Logger

Every write and every load is logged locally as a structured event. This
gives the committee a debugging trail in the console without keeping a
persistent history (records themselves are the only durable state).

Photo data and payment notes are never logged, only ids, names and amounts.
"""

import logging
import sys
from typing import Optional

import structlog

from society.config import get_settings


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure stdlib logging and structlog for the application.

    Args:
        level: Log level name; taken from settings if None
    """
    level = level or get_settings().society.log_level
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class ActivityLogger:
    """Structured local logging of society activity."""

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self._logger = logger or structlog.get_logger("society.activity")

    def data_loaded(self, members: int, payments: int, expenses: int) -> None:
        self._logger.info(
            "data_loaded",
            members=members,
            payments=payments,
            expenses=expenses,
        )

    def load_failed(self, error: Exception) -> None:
        self._logger.error(
            "load_failed",
            error_type=type(error).__name__,
            error=str(error),
        )

    def member_added(self, member_id: str, name: str, flat_number: str) -> None:
        self._logger.info(
            "member_added",
            member_id=member_id,
            name=name,
            flat_number=flat_number,
        )

    def payment_recorded(
        self,
        payment_id: str,
        member_id: str,
        month: str,
        amount: str,
        member_known: bool,
    ) -> None:
        log = self._logger.info if member_known else self._logger.warning
        log(
            "payment_recorded",
            payment_id=payment_id,
            member_id=member_id,
            month=month,
            amount=amount,
            member_known=member_known,
        )

    def expense_logged(
        self,
        expense_id: str,
        title: str,
        category: str,
        amount: str,
    ) -> None:
        self._logger.info(
            "expense_logged",
            expense_id=expense_id,
            title=title,
            category=category,
            amount=amount,
        )

    def validation_failed(self, action: str, fields: list[str]) -> None:
        self._logger.warning("validation_failed", action=action, fields=fields)

    def write_failed(self, collection: str, record_id: str, error: Exception) -> None:
        self._logger.error(
            "write_failed",
            collection=collection,
            record_id=record_id,
            error_type=type(error).__name__,
            error=str(error),
        )
