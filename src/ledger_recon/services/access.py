"""
Capability checks for ledger mutations.

Identity comes from the external identity provider; this module only
decides what an identified actor may do.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, Optional
import logging

from ..utils.exceptions import PermissionDeniedError

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Ledger operations gated by the access policy."""

    PROMOTE = "promote"
    CREATE = "create"
    IMPORT = "import"
    DELETE = "delete"
    RESTORE = "restore"
    PURGE = "purge"
    RECORD_CARD_PAYMENT = "record"

    @property
    def subject(self) -> str:
        if self is Capability.RECORD_CARD_PAYMENT:
            return "card payments"
        return "transactions"


class AccessPolicy(ABC):
    """Single collaborator consulted before any gated ledger mutation."""

    @abstractmethod
    def allows(self, actor: Optional[str], capability: Capability) -> bool:
        pass

    def require(self, actor: Optional[str], capability: Capability) -> None:
        """
        Raise PermissionDeniedError unless ``actor`` holds ``capability``.
        """
        if not self.allows(actor, capability):
            logger.warning(f"Denied {capability.value} for actor {actor!r}")
            raise PermissionDeniedError(
                f"{actor or 'Anonymous user'} is not allowed to {capability.value} {capability.subject}"
            )


class AdminAccessPolicy(AccessPolicy):
    """Grants every capability to the configured admin identities only."""

    def __init__(self, admin_emails: Iterable[str]):
        self.admin_emails = {email.strip().lower() for email in admin_emails if email.strip()}

    @classmethod
    def from_config(cls, config) -> "AdminAccessPolicy":
        return cls(config.access.admin_emails)

    def is_admin(self, actor: Optional[str]) -> bool:
        return bool(actor) and actor.strip().lower() in self.admin_emails

    def allows(self, actor: Optional[str], capability: Capability) -> bool:
        return self.is_admin(actor)
