"""
CSV-file ledger store.
Keeps the ledger in a single CSV file read and written with pandas.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..models.transaction import LedgerTransaction, TransactionDraft
from ..utils.amounts import parse_amount
from ..utils.dates import normalize_date
from ..utils.exceptions import (
    LedgerReadError,
    LedgerWriteError,
    TransactionNotFoundError,
)
from .store import LedgerStore, new_transaction_id, transaction_from_draft

logger = logging.getLogger(__name__)

LEDGER_COLUMNS = [
    "id",
    "date",
    "vendor",
    "description",
    "amount",
    "category",
    "property",
    "unit",
    "card_used",
    "created_at",
    "deleted",
]


class CsvLedgerStore(LedgerStore):
    """
    Ledger persisted as a CSV file.

    A missing file is an empty ledger; it is created on the first write.
    Every operation re-reads the file, so the snapshot always reflects the
    current contents on disk.
    """

    def __init__(self, path: Path, encoding: str = "utf-8"):
        self.path = Path(path)
        self.encoding = encoding

    def fetch_transactions(self, include_deleted: bool = False) -> list[LedgerTransaction]:
        transactions = self._load()
        if not include_deleted:
            transactions = [t for t in transactions if not t.deleted]
        logger.debug(f"Loaded {len(transactions)} ledger transactions from {self.path}")
        return transactions

    def create_transaction(self, draft: TransactionDraft) -> str:
        transactions = self._load()
        transaction_id = new_transaction_id()
        transactions.append(transaction_from_draft(transaction_id, draft))
        self._save(transactions)
        logger.info(f"Created ledger transaction {transaction_id}: {draft.vendor!r} {draft.amount}")
        return transaction_id

    def get_transaction(self, transaction_id: str) -> LedgerTransaction:
        return _find(self._load(), transaction_id)

    def set_deleted(self, transaction_id: str, deleted: bool) -> None:
        transactions = self._load()
        target = _find(transactions, transaction_id)
        target.deleted = deleted
        self._save(transactions)
        logger.info(f"Transaction {transaction_id} {'deleted' if deleted else 'restored'}")

    def delete_permanently(self, transaction_id: str) -> None:
        transactions = self._load()
        target = _find(transactions, transaction_id)
        self._save([t for t in transactions if t is not target])
        logger.info(f"Transaction {transaction_id} permanently deleted")

    def _load(self) -> list[LedgerTransaction]:
        if not self.path.exists():
            return []

        try:
            df = pd.read_csv(
                self.path,
                encoding=self.encoding,
                index_col=False,
                dtype=str,
                keep_default_na=False,
            )
        except pd.errors.EmptyDataError:
            return []
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            logger.error(f"Failed to read ledger file: {e}")
            raise LedgerReadError(f"Failed to read ledger file {self.path}: {e}") from e

        missing = [c for c in ("id", "date", "vendor", "amount") if c not in df.columns]
        if missing:
            raise LedgerReadError(f"Ledger file {self.path} is missing columns: {missing}")

        transactions: list[LedgerTransaction] = []
        for idx, row in df.iterrows():
            txn = self._row_to_transaction(row, int(idx))
            if txn:
                transactions.append(txn)
        return transactions

    def _row_to_transaction(self, row: pd.Series, idx: int) -> Optional[LedgerTransaction]:
        txn_date = normalize_date(row.get("date"))
        if txn_date is None:
            logger.warning(f"Ledger row {idx + 1}: Invalid date, skipping")
            return None

        amount = parse_amount(str(row.get("amount", "")).strip() or "0")
        if amount is None:
            # snapshot amounts must be finite for the tolerance comparison
            logger.warning(f"Ledger row {idx + 1}: Invalid amount {row.get('amount')!r}, skipping")
            return None

        try:
            created_at = datetime.fromisoformat(str(row.get("created_at", "")).strip())
        except ValueError:
            created_at = None

        return LedgerTransaction(
            id=str(row["id"]),
            date=txn_date,
            vendor=str(row.get("vendor", "")),
            amount=amount,
            description=str(row.get("description", "")),
            category=str(row.get("category", "")),
            property=str(row.get("property", "")),
            unit=str(row.get("unit", "")),
            card_used=str(row.get("card_used", "")),
            created_at=created_at,
            deleted=str(row.get("deleted", "")).strip().lower() in ("true", "1", "yes"),
        )

    def _save(self, transactions: list[LedgerTransaction]) -> None:
        rows = [
            {
                "id": t.id,
                "date": t.date.isoformat(),
                "vendor": t.vendor,
                "description": t.description,
                "amount": str(t.amount),
                "category": t.category,
                "property": t.property,
                "unit": t.unit,
                "card_used": t.card_used,
                "created_at": t.created_at.isoformat() if t.created_at else "",
                "deleted": "true" if t.deleted else "false",
            }
            for t in transactions
        ]

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            pd.DataFrame(rows, columns=LEDGER_COLUMNS).to_csv(
                self.path, index=False, encoding=self.encoding
            )
        except OSError as e:
            logger.error(f"Failed to write ledger file: {e}")
            raise LedgerWriteError(f"Failed to write ledger file {self.path}: {e}") from e


def _find(transactions: list[LedgerTransaction], transaction_id: str) -> LedgerTransaction:
    for txn in transactions:
        if txn.id == transaction_id:
            return txn
    raise TransactionNotFoundError(f"Transaction not found: {transaction_id}")
