"""
Ledger store interface.

The ledger itself lives in an external document store; the reconciliation
core only needs a full snapshot read and a create operation, plus the
soft-delete lifecycle used by the deleted-items screens.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional
from uuid import uuid4
import logging

from ..models.transaction import LedgerTransaction, TransactionDraft
from ..utils.exceptions import TransactionNotFoundError

logger = logging.getLogger(__name__)


def new_transaction_id() -> str:
    """Generate an opaque ledger identifier."""
    return uuid4().hex


def transaction_from_draft(
    transaction_id: str, draft: TransactionDraft
) -> LedgerTransaction:
    """Materialize a draft as a stored ledger transaction."""
    return LedgerTransaction(
        id=transaction_id,
        date=draft.date,
        vendor=draft.vendor,
        amount=draft.amount,
        description=draft.description,
        category=draft.category,
        property=draft.property,
        unit=draft.unit,
        card_used=draft.card_used,
        created_at=datetime.now(),
        deleted=False,
    )


class LedgerStore(ABC):
    """
    Abstract interface for ledger storage.

    Any backend must implement these methods. Read failures raise
    LedgerReadError, write failures LedgerWriteError, and unknown ids
    TransactionNotFoundError.
    """

    @abstractmethod
    def fetch_transactions(self, include_deleted: bool = False) -> list[LedgerTransaction]:
        """
        Return the complete current ledger snapshot in store order.

        Args:
            include_deleted: Also return soft-deleted records
        """
        pass

    @abstractmethod
    def create_transaction(self, draft: TransactionDraft) -> str:
        """
        Persist a draft and return its assigned identifier.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> LedgerTransaction:
        pass

    @abstractmethod
    def set_deleted(self, transaction_id: str, deleted: bool) -> None:
        """Set or clear the soft-delete flag on a record."""
        pass

    @abstractmethod
    def delete_permanently(self, transaction_id: str) -> None:
        pass

    def soft_delete(self, transaction_id: str) -> None:
        self.set_deleted(transaction_id, True)

    def restore(self, transaction_id: str) -> None:
        self.set_deleted(transaction_id, False)

    def list_deleted(self) -> list[LedgerTransaction]:
        return [t for t in self.fetch_transactions(include_deleted=True) if t.deleted]


class InMemoryLedgerStore(LedgerStore):
    """Ledger kept in a dict, in insertion order. Used for tests and embedding."""

    def __init__(self, transactions: Optional[Iterable[LedgerTransaction]] = None):
        self._transactions: dict[str, LedgerTransaction] = {}
        for txn in transactions or []:
            self._transactions[txn.id] = txn

    def fetch_transactions(self, include_deleted: bool = False) -> list[LedgerTransaction]:
        return [
            t for t in self._transactions.values() if include_deleted or not t.deleted
        ]

    def create_transaction(self, draft: TransactionDraft) -> str:
        transaction_id = new_transaction_id()
        self._transactions[transaction_id] = transaction_from_draft(transaction_id, draft)
        logger.info(f"Created ledger transaction {transaction_id}: {draft.vendor!r} {draft.amount}")
        return transaction_id

    def get_transaction(self, transaction_id: str) -> LedgerTransaction:
        try:
            return self._transactions[transaction_id]
        except KeyError:
            raise TransactionNotFoundError(f"Transaction not found: {transaction_id}") from None

    def set_deleted(self, transaction_id: str, deleted: bool) -> None:
        self.get_transaction(transaction_id).deleted = deleted
        logger.info(f"Transaction {transaction_id} {'deleted' if deleted else 'restored'}")

    def delete_permanently(self, transaction_id: str) -> None:
        self.get_transaction(transaction_id)
        del self._transactions[transaction_id]
        logger.info(f"Transaction {transaction_id} permanently deleted")
