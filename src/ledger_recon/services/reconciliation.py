"""
Reconciliation session service.

Drives one statement upload: parse, fetch the ledger snapshot, match,
and promote unmatched bank lines into the ledger.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from ..config import ReconConfig, RefreshMode
from ..ledger.store import LedgerStore, transaction_from_draft
from ..matching.matcher import ReconciliationMatcher
from ..models.transaction import (
    BankLine,
    MatchResult,
    ReconciliationSummary,
    TransactionDraft,
)
from ..parsers.statement_parser import StatementParser
from ..utils.exceptions import LedgerReadError, LedgerWriteError, ReconciliationError
from .access import AccessPolicy, Capability

logger = logging.getLogger(__name__)


class ReconciliationService:
    """
    Stateful wrapper around the pure matcher for a single session.

    Results are only replaced after an operation succeeds: a failed
    snapshot fetch or ledger write leaves the current results untouched.
    """

    def __init__(
        self,
        store: LedgerStore,
        access_policy: AccessPolicy,
        config: Optional[ReconConfig] = None,
        matcher: Optional[ReconciliationMatcher] = None,
    ):
        self.store = store
        self.access_policy = access_policy
        self.config = config or ReconConfig()
        self.matcher = matcher or ReconciliationMatcher(self.config)
        self.parser = StatementParser(self.config)

        self.statement_filename = ""
        self.bank_lines: list[BankLine] = []
        self.results: list[MatchResult] = []
        self.snapshot_size = 0
        self.processing_time = 0.0

    def load_statement(self, text: str, filename: str = "") -> list[BankLine]:
        """Parse statement text and start a new session with it."""
        self.bank_lines = self.parser.parse_text(text)
        self.statement_filename = filename
        self.results = []
        return self.bank_lines

    def load_statement_file(self, path: Path) -> list[BankLine]:
        self.bank_lines = self.parser.parse_file(path)
        self.statement_filename = Path(path).name
        self.results = []
        return self.bank_lines

    def run(self) -> list[MatchResult]:
        """
        Fetch the ledger snapshot once and match all loaded bank lines.

        Raises:
            LedgerReadError: If the snapshot cannot be fetched
        """
        start_time = datetime.now()

        try:
            snapshot = self.store.fetch_transactions(
                include_deleted=self.config.matching.include_deleted
            )
        except LedgerReadError as e:
            logger.error(f"Ledger snapshot fetch failed, matcher not run: {e}")
            raise

        self.results = self.matcher.match(self.bank_lines, snapshot)
        self.snapshot_size = len(snapshot)
        self.processing_time = (datetime.now() - start_time).total_seconds()

        return self.results

    def unmatched(self) -> list[MatchResult]:
        return [r for r in self.results if not r.matched]

    def promote(self, index: int, actor: Optional[str]) -> str:
        """
        Create a ledger transaction from an unmatched bank line.

        Repeated calls create additional records; nothing is deduplicated.

        Args:
            index: Position of the bank line in the current results
            actor: Identity of the user performing the promotion

        Returns:
            Identifier of the created ledger transaction

        Raises:
            PermissionDeniedError: If the actor may not promote
            LedgerWriteError: If the store rejects the write
            ReconciliationError: If there is no bank line at ``index``
        """
        if not 0 <= index < len(self.results):
            raise ReconciliationError(f"No bank line at position {index}")

        result = self.results[index]
        if result.matched:
            logger.warning(
                f"Bank line {index} already matches ledger transaction "
                f"{result.matched_ledger_id}, promoting anyway"
            )

        self.access_policy.require(actor, Capability.PROMOTE)

        draft = TransactionDraft.from_bank_line(
            result.bank_line, self.config.promotion.default_category
        )

        try:
            transaction_id = self.store.create_transaction(draft)
        except LedgerWriteError as e:
            logger.error(f"Promotion of bank line {index} failed: {e}")
            raise

        logger.info(f"Promoted bank line {index} as ledger transaction {transaction_id}")

        refreshed = False
        if self.config.matching.refresh_mode == RefreshMode.FULL:
            try:
                self.run()
                refreshed = True
            except LedgerReadError as e:
                # the record is already written; fall back to the new record alone
                logger.warning(f"Full refresh after promotion failed, updating incrementally: {e}")

        if not refreshed:
            self.results = self.matcher.rematch(
                self.results, transaction_from_draft(transaction_id, draft)
            )
            self.snapshot_size += 1

        return transaction_id

    def promote_all_unmatched(self, actor: Optional[str]) -> list[str]:
        """
        Promote every unmatched bank line.

        Lines that start matching an earlier promotion (duplicate rows on the
        statement) are skipped.
        """
        self.access_policy.require(actor, Capability.PROMOTE)

        created: list[str] = []
        for index in range(len(self.results)):
            if self.results[index].matched:
                continue
            created.append(self.promote(index, actor))

        logger.info(f"Promoted {len(created)} unmatched bank lines")
        return created

    def summary(self) -> ReconciliationSummary:
        return self.matcher.generate_summary(
            self.results,
            ledger_count=self.snapshot_size,
            statement_filename=self.statement_filename,
            processing_time=self.processing_time,
        )
