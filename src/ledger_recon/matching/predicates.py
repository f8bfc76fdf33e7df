"""
Match predicate for bank lines against ledger transactions.
A bank line and a ledger transaction match when all three predicates hold.
"""

from decimal import Decimal

from ..models.transaction import BankLine, LedgerTransaction
from ..utils.dates import normalize_date

DEFAULT_AMOUNT_TOLERANCE = Decimal("0.01")


def dates_match(bank_line: BankLine, transaction: LedgerTransaction) -> bool:
    """Same calendar date once both sides are reduced to date-only values."""
    bank_date = normalize_date(bank_line.date)
    ledger_date = normalize_date(transaction.date)
    return bank_date is not None and bank_date == ledger_date


def amounts_match(
    bank_line: BankLine,
    transaction: LedgerTransaction,
    tolerance: Decimal = DEFAULT_AMOUNT_TOLERANCE,
) -> bool:
    """Absolute difference strictly below the tolerance (one cent by default)."""
    return abs(Decimal(bank_line.amount) - Decimal(transaction.amount)) < tolerance


def text_overlaps(
    bank_line: BankLine,
    transaction: LedgerTransaction,
    skip_blank: bool = False,
) -> bool:
    """
    Case-insensitive containment in either direction between the bank
    description and the ledger vendor.

    An empty string is contained in everything, so a blank side matches any
    text unless ``skip_blank`` is set.
    """
    description = (bank_line.description or "").lower()
    vendor = (transaction.vendor or "").lower()

    if skip_blank and (not description.strip() or not vendor.strip()):
        return False

    return vendor in description or description in vendor


def is_match(
    bank_line: BankLine,
    transaction: LedgerTransaction,
    tolerance: Decimal = DEFAULT_AMOUNT_TOLERANCE,
    skip_blank: bool = False,
) -> bool:
    """Full match predicate: date, amount and text must all agree."""
    return (
        dates_match(bank_line, transaction)
        and amounts_match(bank_line, transaction, tolerance)
        and text_overlaps(bank_line, transaction, skip_blank)
    )
