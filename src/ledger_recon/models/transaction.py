"""Data models for bank lines, ledger transactions and match results."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class BankLine:
    """
    One row of an uploaded bank statement.

    Transient: bank lines live only for the duration of a reconciliation
    session and are never persisted.
    """

    date: date
    description: str
    amount: Decimal

    # 1-based data row in the source CSV, for display only
    row_number: Optional[int] = field(default=None, compare=False)


@dataclass
class LedgerTransaction:
    """
    A recognized transaction in the ledger.

    Matching reads only ``id``, ``date``, ``vendor`` and ``amount``; the
    remaining fields are the bookkeeping attributes carried by the store.
    """

    id: str
    date: date
    vendor: str
    amount: Decimal

    description: str = ""
    category: str = ""
    property: str = ""
    unit: str = ""
    card_used: str = ""
    created_at: Optional[datetime] = None
    deleted: bool = False


@dataclass
class TransactionDraft:
    """A ledger record that has not been assigned an identifier yet."""

    date: date
    vendor: str
    description: str
    amount: Decimal
    category: str
    property: str = ""
    unit: str = ""
    card_used: str = ""

    @classmethod
    def from_bank_line(cls, bank_line: BankLine, category: str) -> "TransactionDraft":
        """Build the draft used when promoting an unmatched bank line."""
        return cls(
            date=bank_line.date,
            vendor=bank_line.description,
            description=bank_line.description,
            amount=bank_line.amount,
            category=category,
        )


@dataclass
class MatchResult:
    """Outcome of matching one bank line against a ledger snapshot."""

    bank_line: BankLine
    matched_transaction: Optional[LedgerTransaction] = None

    @property
    def matched(self) -> bool:
        return self.matched_transaction is not None

    @property
    def matched_ledger_id(self) -> Optional[str]:
        if self.matched_transaction is None:
            return None
        return self.matched_transaction.id

    @property
    def amount_delta(self) -> Optional[Decimal]:
        """Bank amount minus ledger amount, None when unmatched."""
        if self.matched_transaction is None:
            return None
        return self.bank_line.amount - self.matched_transaction.amount


@dataclass
class ReconciliationSummary:
    """Summary of one reconciliation run."""

    statement_filename: str
    reconciliation_date: datetime
    statement_period_start: Optional[date]
    statement_period_end: Optional[date]

    total_bank_lines: int
    total_ledger_transactions: int
    matched_count: int
    unmatched_count: int

    bank_total: Decimal
    unmatched_total: Decimal

    processing_time_seconds: float = 0.0
    config_file_used: Optional[str] = None

    @property
    def match_rate(self) -> float:
        """Percentage of bank lines matched."""
        if self.total_bank_lines == 0:
            return 0.0
        return (self.matched_count / self.total_bank_lines) * 100


@dataclass
class ExportFilter:
    """Date range and property filter for ledger exports."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    property: str = ""

    def accepts(self, transaction: LedgerTransaction) -> bool:
        """Inclusive date bounds, case-insensitive substring on property."""
        if self.start_date and transaction.date < self.start_date:
            return False
        if self.end_date and transaction.date > self.end_date:
            return False
        if self.property and self.property.lower() not in (transaction.property or "").lower():
            return False
        return True


@dataclass
class CardPaymentDraft:
    """A card payment that has not been assigned an identifier yet."""

    card: str
    date: date
    amount: Decimal
    bank_used: str
    note: str = ""


@dataclass
class CardPayment:
    """A payment made towards a credit card from a bank account."""

    id: str
    card: str
    date: date
    amount: Decimal
    bank_used: str
    note: str = ""
    created_at: Optional[datetime] = None
