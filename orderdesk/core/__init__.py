"""
Core package containing configuration, database, errors, and logging.
"""
from orderdesk.core.config import settings
from orderdesk.core.database import Base, DbSession, get_db_session
from orderdesk.core.errors import (
    BusinessError,
    DatabaseError,
    ErrorKind,
    NotFoundError,
    OrderDeskError,
    PaymentError,
    ValidationError,
)
from orderdesk.core.logging import configure_logging, get_logger

__all__ = [
    "settings",
    "Base",
    "DbSession",
    "get_db_session",
    "configure_logging",
    "get_logger",
    "ErrorKind",
    "OrderDeskError",
    "ValidationError",
    "NotFoundError",
    "BusinessError",
    "PaymentError",
    "DatabaseError",
]
