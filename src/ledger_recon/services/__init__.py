"""Session, bookkeeping and ledger administration services."""

from .access import AccessPolicy, AdminAccessPolicy, Capability
from .reconciliation import ReconciliationService
from .bookkeeping import BookkeepingService
from .card_payments import CardPaymentService
from .ledger_admin import LedgerAdminService

__all__ = [
    "AccessPolicy",
    "AdminAccessPolicy",
    "Capability",
    "ReconciliationService",
    "BookkeepingService",
    "CardPaymentService",
    "LedgerAdminService",
]
