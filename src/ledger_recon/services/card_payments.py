"""Card payment records, gated by the access policy."""

from typing import Optional
import logging

from ..ledger.card_store import CardPaymentStore
from ..models.transaction import CardPayment, CardPaymentDraft
from ..utils.exceptions import InvalidRecordError
from .access import AccessPolicy, Capability

logger = logging.getLogger(__name__)


class CardPaymentService:
    """Listing and recording of payments made towards credit cards."""

    def __init__(self, store: CardPaymentStore, access_policy: AccessPolicy):
        self.store = store
        self.access_policy = access_policy

    def list_payments(self) -> list[CardPayment]:
        """Return card payments newest first."""
        return sorted(self.store.fetch_payments(), key=lambda p: p.date, reverse=True)

    def add_payment(self, draft: CardPaymentDraft, actor: Optional[str]) -> str:
        """
        Record a card payment.

        Raises:
            PermissionDeniedError: If the actor may not record card payments
            InvalidRecordError: If card or bank is missing
        """
        self.access_policy.require(actor, Capability.RECORD_CARD_PAYMENT)

        missing = [name for name in ("card", "bank_used") if not getattr(draft, name).strip()]
        if missing:
            raise InvalidRecordError(f"Card payment is missing required fields: {', '.join(missing)}")

        if not draft.amount.is_finite():
            raise InvalidRecordError(f"Card payment amount must be a finite number, got {draft.amount}")

        payment_id = self.store.create_payment(draft)
        logger.info(f"{actor} recorded card payment {payment_id}")
        return payment_id
