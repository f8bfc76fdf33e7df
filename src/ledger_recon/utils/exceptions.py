"""Custom exceptions for the reconciliation application."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class StatementParseError(ReconciliationError):
    """Error reading a bank statement file."""

    pass


class LedgerReadError(ReconciliationError):
    """Error fetching the ledger snapshot."""

    pass


class LedgerWriteError(ReconciliationError):
    """Error writing a ledger record."""

    pass


class TransactionNotFoundError(ReconciliationError):
    """Ledger record does not exist."""

    pass


class PermissionDeniedError(ReconciliationError):
    """Actor lacks the capability for an operation."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating an export or report file."""

    pass


class InvalidRecordError(ReconciliationError):
    """A record to be written is missing required fields or is malformed."""

    pass
