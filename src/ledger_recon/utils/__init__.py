"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    StatementParseError,
    LedgerReadError,
    LedgerWriteError,
    TransactionNotFoundError,
    PermissionDeniedError,
    ConfigurationError,
    ReportGenerationError,
    InvalidRecordError,
)
from .logging_config import setup_logging
from .dates import normalize_date

__all__ = [
    "ReconciliationError",
    "StatementParseError",
    "LedgerReadError",
    "LedgerWriteError",
    "TransactionNotFoundError",
    "PermissionDeniedError",
    "ConfigurationError",
    "ReportGenerationError",
    "InvalidRecordError",
    "setup_logging",
    "normalize_date",
]
