"""Data models for reconciliation."""

from .transaction import (
    BankLine,
    LedgerTransaction,
    TransactionDraft,
    MatchResult,
    ReconciliationSummary,
    ExportFilter,
    CardPayment,
    CardPaymentDraft,
)

__all__ = [
    "BankLine",
    "LedgerTransaction",
    "TransactionDraft",
    "MatchResult",
    "ReconciliationSummary",
    "ExportFilter",
    "CardPayment",
    "CardPaymentDraft",
]
