"""
Reconciliation matcher.
Pairs each bank line with at most one ledger transaction from a snapshot.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
import logging

from ..models.transaction import (
    BankLine,
    LedgerTransaction,
    MatchResult,
    ReconciliationSummary,
)
from ..config import ReconConfig, TieBreakPolicy
from .predicates import is_match

logger = logging.getLogger(__name__)


class ReconciliationMatcher:
    """
    Matches bank lines against a ledger snapshot.

    The matcher is pure: it never mutates its inputs and performs no I/O.
    Each bank line yields exactly one MatchResult, in input order. When
    several ledger transactions satisfy the predicate for one line the
    configured tie-break policy picks the winner:

    - ``snapshot_order``: the first satisfying transaction in snapshot order
    - ``closest_amount``: the smallest absolute amount delta, then the
      smallest id
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the matcher.

        Args:
            config: Application configuration, defaults when omitted
        """
        self.config = config or ReconConfig()
        matching = self.config.matching
        self.amount_tolerance = Decimal(matching.amount_tolerance)
        self.tie_break = TieBreakPolicy(matching.tie_break)
        self.skip_blank_text = matching.skip_blank_text

    def is_match(self, bank_line: BankLine, transaction: LedgerTransaction) -> bool:
        """Apply the match predicate with this matcher's settings."""
        return is_match(
            bank_line,
            transaction,
            tolerance=self.amount_tolerance,
            skip_blank=self.skip_blank_text,
        )

    def match(
        self,
        bank_lines: list[BankLine],
        snapshot: list[LedgerTransaction],
    ) -> list[MatchResult]:
        """
        Match every bank line against the full ledger snapshot.

        Args:
            bank_lines: Bank lines in statement order
            snapshot: Complete ledger snapshot, in store order

        Returns:
            One MatchResult per bank line, same order as ``bank_lines``
        """
        logger.info(
            f"Matching {len(bank_lines)} bank lines against "
            f"{len(snapshot)} ledger transactions ({self.tie_break.value})"
        )

        results: list[MatchResult] = []
        for bank_line in bank_lines:
            candidates = [t for t in snapshot if self.is_match(bank_line, t)]
            chosen = self._select(bank_line, candidates)

            if len(candidates) > 1:
                logger.debug(
                    f"{len(candidates)} ledger candidates for {bank_line.description!r} "
                    f"on {bank_line.date}, chose {chosen.id}"
                )

            results.append(MatchResult(bank_line=bank_line, matched_transaction=chosen))

        matched = sum(1 for r in results if r.matched)
        logger.info(f"Matching complete: {matched} matched, {len(results) - matched} unmatched")

        return results

    def rematch(
        self,
        previous: list[MatchResult],
        new_transaction: LedgerTransaction,
    ) -> list[MatchResult]:
        """
        Update a result set after a single transaction joins the ledger.

        Only the new transaction is examined, treated as appended to the end
        of the snapshot the previous results came from. The outcome equals a
        full ``match`` over that extended snapshot.

        Args:
            previous: Results of an earlier ``match`` or ``rematch``
            new_transaction: The newly created ledger transaction

        Returns:
            A new result list; ``previous`` is not modified
        """
        results: list[MatchResult] = []
        changed = 0

        for result in previous:
            if not self.is_match(result.bank_line, new_transaction):
                results.append(result)
                continue

            candidates = []
            if result.matched_transaction is not None:
                candidates.append(result.matched_transaction)
            candidates.append(new_transaction)

            chosen = self._select(result.bank_line, candidates)
            if chosen is not result.matched_transaction:
                changed += 1
            results.append(MatchResult(bank_line=result.bank_line, matched_transaction=chosen))

        logger.debug(f"Incremental rematch with {new_transaction.id}: {changed} result(s) changed")

        return results

    def _select(
        self,
        bank_line: BankLine,
        candidates: list[LedgerTransaction],
    ) -> Optional[LedgerTransaction]:
        """Pick one candidate according to the tie-break policy."""
        if not candidates:
            return None

        if self.tie_break == TieBreakPolicy.CLOSEST_AMOUNT:
            return min(
                candidates,
                key=lambda t: (abs(Decimal(bank_line.amount) - Decimal(t.amount)), str(t.id)),
            )

        return candidates[0]

    def generate_summary(
        self,
        results: list[MatchResult],
        ledger_count: int,
        statement_filename: str = "",
        processing_time: float = 0.0,
    ) -> ReconciliationSummary:
        """
        Generate a summary of the reconciliation results.

        Args:
            results: Match results of a run
            ledger_count: Size of the ledger snapshot matched against
            statement_filename: Name of the uploaded statement
            processing_time: Time taken in seconds

        Returns:
            Reconciliation summary object
        """
        unmatched = [r for r in results if not r.matched]
        dates = [r.bank_line.date for r in results]

        return ReconciliationSummary(
            statement_filename=statement_filename,
            reconciliation_date=datetime.now(),
            statement_period_start=min(dates) if dates else None,
            statement_period_end=max(dates) if dates else None,
            total_bank_lines=len(results),
            total_ledger_transactions=ledger_count,
            matched_count=len(results) - len(unmatched),
            unmatched_count=len(unmatched),
            bank_total=sum((r.bank_line.amount for r in results), Decimal("0")),
            unmatched_total=sum((r.bank_line.amount for r in unmatched), Decimal("0")),
            processing_time_seconds=processing_time,
            config_file_used=self.config.config_file_path,
        )
