"""
Card payment storage.
Card payments are kept apart from the ledger and never take part in matching.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional
import logging

import pandas as pd

from ..models.transaction import CardPayment, CardPaymentDraft
from ..utils.amounts import parse_amount
from ..utils.dates import normalize_date
from ..utils.exceptions import LedgerReadError, LedgerWriteError
from .store import new_transaction_id

logger = logging.getLogger(__name__)

CARD_PAYMENT_COLUMNS = ["id", "card", "date", "amount", "bank_used", "note", "created_at"]


def payment_from_draft(payment_id: str, draft: CardPaymentDraft) -> CardPayment:
    return CardPayment(
        id=payment_id,
        card=draft.card,
        date=draft.date,
        amount=draft.amount,
        bank_used=draft.bank_used,
        note=draft.note,
        created_at=datetime.now(),
    )


class CardPaymentStore(ABC):
    """Abstract interface for card payment storage."""

    @abstractmethod
    def fetch_payments(self) -> list[CardPayment]:
        """Return every card payment in store order."""
        pass

    @abstractmethod
    def create_payment(self, draft: CardPaymentDraft) -> str:
        """Persist a draft and return its assigned identifier."""
        pass


class InMemoryCardPaymentStore(CardPaymentStore):
    def __init__(self, payments: Optional[Iterable[CardPayment]] = None):
        self._payments: list[CardPayment] = list(payments or [])

    def fetch_payments(self) -> list[CardPayment]:
        return list(self._payments)

    def create_payment(self, draft: CardPaymentDraft) -> str:
        payment_id = new_transaction_id()
        self._payments.append(payment_from_draft(payment_id, draft))
        logger.info(f"Recorded card payment {payment_id}: {draft.card!r} {draft.amount}")
        return payment_id


class CsvCardPaymentStore(CardPaymentStore):
    """
    Card payments persisted as a CSV file.

    A missing file holds no payments; it is created on the first write.
    """

    def __init__(self, path: Path, encoding: str = "utf-8"):
        self.path = Path(path)
        self.encoding = encoding

    def fetch_payments(self) -> list[CardPayment]:
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
            logger.error(f"Failed to read card payments file: {e}")
            raise LedgerReadError(f"Failed to read card payments file {self.path}: {e}") from e

        missing = [c for c in ("id", "card", "date", "amount") if c not in df.columns]
        if missing:
            raise LedgerReadError(f"Card payments file {self.path} is missing columns: {missing}")

        payments: list[CardPayment] = []
        for idx, row in df.iterrows():
            payment_date = normalize_date(row.get("date"))
            amount = parse_amount(row.get("amount"))
            if payment_date is None or amount is None:
                logger.warning(f"Card payment row {int(idx) + 1}: Invalid date or amount, skipping")
                continue

            try:
                created_at = datetime.fromisoformat(str(row.get("created_at", "")).strip())
            except ValueError:
                created_at = None

            payments.append(
                CardPayment(
                    id=str(row["id"]),
                    card=str(row["card"]),
                    date=payment_date,
                    amount=amount,
                    bank_used=str(row.get("bank_used", "")),
                    note=str(row.get("note", "")),
                    created_at=created_at,
                )
            )
        return payments

    def create_payment(self, draft: CardPaymentDraft) -> str:
        payments = self.fetch_payments()
        payment_id = new_transaction_id()
        payments.append(payment_from_draft(payment_id, draft))

        rows = [
            {
                "id": p.id,
                "card": p.card,
                "date": p.date.isoformat(),
                "amount": str(p.amount),
                "bank_used": p.bank_used,
                "note": p.note,
                "created_at": p.created_at.isoformat() if p.created_at else "",
            }
            for p in payments
        ]

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            pd.DataFrame(rows, columns=CARD_PAYMENT_COLUMNS).to_csv(
                self.path, index=False, encoding=self.encoding
            )
        except OSError as e:
            logger.error(f"Failed to write card payments file: {e}")
            raise LedgerWriteError(f"Failed to write card payments file {self.path}: {e}") from e

        logger.info(f"Recorded card payment {payment_id}: {draft.card!r} {draft.amount}")
        return payment_id
