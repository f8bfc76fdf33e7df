"""
Day-to-day bookkeeping on the ledger.

Manual transaction entry, bulk CSV import and the transaction list.
Every write goes through the access policy.
"""

from pathlib import Path
from typing import Optional
import logging

from ..config import ReconConfig
from ..ledger.store import LedgerStore
from ..models.transaction import LedgerTransaction, TransactionDraft
from ..parsers.transaction_import import TransactionImportParser
from ..utils.exceptions import InvalidRecordError, LedgerWriteError
from .access import AccessPolicy, Capability

logger = logging.getLogger(__name__)


class BookkeepingService:
    """Entry and listing of ledger transactions."""

    def __init__(
        self,
        store: LedgerStore,
        access_policy: AccessPolicy,
        config: Optional[ReconConfig] = None,
    ):
        self.store = store
        self.access_policy = access_policy
        self.config = config or ReconConfig()
        self.import_parser = TransactionImportParser(self.config)

    def list_transactions(self, property: str = "", card: str = "") -> list[LedgerTransaction]:
        """
        Return active transactions newest first.

        Args:
            property: Case-insensitive substring of the property name
            card: Case-insensitive substring of the card used
        """
        transactions = [
            t
            for t in self.store.fetch_transactions()
            if (not property or property.lower() in t.property.lower())
            and (not card or card.lower() in t.card_used.lower())
        ]
        # stable sort keeps store order for transactions on the same day
        return sorted(transactions, key=lambda t: t.date, reverse=True)

    def add_transaction(self, draft: TransactionDraft, actor: Optional[str]) -> str:
        """
        Validate and record a manually entered transaction.

        Raises:
            PermissionDeniedError: If the actor may not create transactions
            InvalidRecordError: If required fields are missing or the
                category is not a configured one
        """
        self.access_policy.require(actor, Capability.CREATE)

        missing = [
            name
            for name in ("vendor", "category", "property", "card_used")
            if not getattr(draft, name).strip()
        ]
        if missing:
            raise InvalidRecordError(f"Transaction is missing required fields: {', '.join(missing)}")

        if not draft.amount.is_finite():
            raise InvalidRecordError(f"Transaction amount must be a finite number, got {draft.amount}")

        categories = self.config.ledger.categories
        if categories and draft.category not in categories:
            raise InvalidRecordError(
                f"Unknown category {draft.category!r}, expected one of: {', '.join(categories)}"
            )

        transaction_id = self.store.create_transaction(draft)
        logger.info(f"{actor} added transaction {transaction_id}")
        return transaction_id

    def import_transactions(self, text: str, actor: Optional[str]) -> list[str]:
        """
        Import transactions from CSV text, one ledger record per valid row.

        Records are written one at a time; if a write fails the records
        already written stay in the ledger and the error propagates.

        Returns:
            Identifiers of the created transactions in row order
        """
        self.access_policy.require(actor, Capability.IMPORT)
        return self._create_all(self.import_parser.parse_text(text), actor)

    def import_file(self, path: Path, actor: Optional[str]) -> list[str]:
        self.access_policy.require(actor, Capability.IMPORT)
        return self._create_all(self.import_parser.parse_file(path), actor)

    def _create_all(self, drafts: list[TransactionDraft], actor: Optional[str]) -> list[str]:
        created: list[str] = []
        for draft in drafts:
            try:
                created.append(self.store.create_transaction(draft))
            except LedgerWriteError:
                logger.error(f"Import stopped after {len(created)} of {len(drafts)} transactions")
                raise

        logger.info(f"{actor} imported {len(created)} transactions")
        return created
