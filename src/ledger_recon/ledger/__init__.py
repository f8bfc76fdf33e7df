"""Ledger and card payment storage backends."""

from .store import LedgerStore, InMemoryLedgerStore
from .csv_store import CsvLedgerStore
from .card_store import CardPaymentStore, InMemoryCardPaymentStore, CsvCardPaymentStore

__all__ = [
    "LedgerStore",
    "InMemoryLedgerStore",
    "CsvLedgerStore",
    "CardPaymentStore",
    "InMemoryCardPaymentStore",
    "CsvCardPaymentStore",
]
