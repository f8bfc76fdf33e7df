"""Deleted-items management for the ledger, gated by the access policy."""

from typing import Optional
import logging

from ..ledger.store import LedgerStore
from ..models.transaction import LedgerTransaction
from .access import AccessPolicy, Capability

logger = logging.getLogger(__name__)


class LedgerAdminService:
    """Soft-delete, restore and permanent removal of ledger transactions."""

    def __init__(self, store: LedgerStore, access_policy: AccessPolicy):
        self.store = store
        self.access_policy = access_policy

    def list_deleted(self) -> list[LedgerTransaction]:
        return self.store.list_deleted()

    def delete(self, transaction_id: str, actor: Optional[str]) -> None:
        self.access_policy.require(actor, Capability.DELETE)
        self.store.soft_delete(transaction_id)

    def restore(self, transaction_id: str, actor: Optional[str]) -> None:
        self.access_policy.require(actor, Capability.RESTORE)
        self.store.restore(transaction_id)

    def purge(self, transaction_id: str, actor: Optional[str]) -> None:
        """Permanently remove a record. This cannot be undone."""
        self.access_policy.require(actor, Capability.PURGE)
        self.store.delete_permanently(transaction_id)
        logger.info(f"{actor} purged transaction {transaction_id}")
