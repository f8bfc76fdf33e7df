"""Tests for the reconciliation session service."""

from decimal import Decimal

import pytest

from ledger_recon.config import RefreshMode
from ledger_recon.ledger.store import InMemoryLedgerStore
from ledger_recon.services.access import AdminAccessPolicy
from ledger_recon.services.reconciliation import ReconciliationService
from ledger_recon.utils.exceptions import (
    LedgerReadError,
    LedgerWriteError,
    PermissionDeniedError,
    ReconciliationError,
)

from conftest import ADMIN, make_txn


class FailingWriteStore(InMemoryLedgerStore):
    def create_transaction(self, draft):
        raise LedgerWriteError("store unavailable")


class FailingReadStore(InMemoryLedgerStore):
    fail = False

    def fetch_transactions(self, include_deleted=False):
        if self.fail:
            raise LedgerReadError("store unavailable")
        return super().fetch_transactions(include_deleted)


def build_service(store, config):
    return ReconciliationService(store, AdminAccessPolicy.from_config(config), config)


def test_run_matches_loaded_statement(service, statement_text):
    service.load_statement(statement_text, filename="may.csv")
    results = service.run()

    assert [r.matched_ledger_id for r in results] == ["t1", "t2", None]
    assert len(service.unmatched()) == 1


@pytest.mark.parametrize("mode", list(RefreshMode))
def test_promoted_line_matches_created_transaction(mode, store, config, statement_text):
    config.matching.refresh_mode = mode
    service = build_service(store, config)
    service.load_statement(statement_text)
    service.run()

    txn_id = service.promote(2, ADMIN)

    assert service.results[2].matched
    assert service.results[2].matched_ledger_id == txn_id
    assert [r.matched_ledger_id for r in service.results[:2]] == ["t1", "t2"]

    created = store.get_transaction(txn_id)
    assert created.vendor == "LOWES STORE 88"
    assert created.description == "LOWES STORE 88"
    assert created.amount == Decimal("27.99")
    assert created.category == "Uncategorized"
    assert (created.property, created.unit, created.card_used) == ("", "", "")


def test_promotion_requires_capability(service, store, statement_text):
    service.load_statement(statement_text)
    service.run()

    with pytest.raises(PermissionDeniedError):
        service.promote(2, "tenant@example.com")
    with pytest.raises(PermissionDeniedError):
        service.promote(2, None)

    assert len(store.fetch_transactions()) == 3
    assert not service.results[2].matched


def test_write_failure_leaves_results_unchanged(config, ledger, statement_text):
    service = build_service(FailingWriteStore(ledger), config)
    service.load_statement(statement_text)
    before = service.run()

    with pytest.raises(LedgerWriteError):
        service.promote(2, ADMIN)

    assert service.results is before
    assert not service.results[2].matched


def test_read_failure_keeps_previous_results(config, ledger, statement_text):
    store = FailingReadStore(ledger)
    service = build_service(store, config)
    service.load_statement(statement_text)
    before = service.run()

    store.fail = True
    with pytest.raises(LedgerReadError):
        service.run()

    assert service.results is before


def test_full_refresh_failure_after_write_still_reflects_promotion(config, ledger, statement_text):
    config.matching.refresh_mode = RefreshMode.FULL
    store = FailingReadStore(ledger)
    service = build_service(store, config)
    service.load_statement(statement_text)
    service.run()

    store.fail = True
    txn_id = service.promote(2, ADMIN)

    assert service.results[2].matched_ledger_id == txn_id
    assert service.snapshot_size == 4

    store.fail = False
    assert [t.id for t in store.fetch_transactions()][-1] == txn_id


def test_repeated_promotion_creates_distinct_records(service, store, statement_text):
    service.load_statement(statement_text)
    service.run()

    first = service.promote(2, ADMIN)
    second = service.promote(2, ADMIN)

    assert first != second
    assert len(store.fetch_transactions()) == 5
    assert service.results[2].matched_ledger_id == first


def test_promote_unknown_position(service, statement_text):
    service.load_statement(statement_text)
    service.run()

    with pytest.raises(ReconciliationError, match="No bank line"):
        service.promote(7, ADMIN)


def test_promote_all_skips_lines_covered_by_earlier_promotion(service, store):
    service.load_statement(
        "Date,Description,Amount\n"
        "2024-05-04,LOWES,27.99\n"
        "2024-05-04,LOWES,27.99\n"
        "2024-05-05,ACE HARDWARE,9.10\n"
    )
    service.run()

    created = service.promote_all_unmatched(ADMIN)

    assert len(created) == 2
    assert all(r.matched for r in service.results)
    assert service.results[0].matched_ledger_id == service.results[1].matched_ledger_id


def test_promote_all_checks_capability_first(service, store, statement_text):
    service.load_statement(statement_text)
    service.run()

    with pytest.raises(PermissionDeniedError):
        service.promote_all_unmatched("tenant@example.com")
    assert len(store.fetch_transactions()) == 3


def test_deleted_transactions_excluded_unless_configured(config, statement_text):
    ledger = [make_txn("t1", deleted=True)]

    service = build_service(InMemoryLedgerStore(ledger), config)
    service.load_statement(statement_text)
    assert not service.run()[0].matched

    config.matching.include_deleted = True
    service = build_service(InMemoryLedgerStore(ledger), config)
    service.load_statement(statement_text)
    assert service.run()[0].matched_ledger_id == "t1"


def test_loading_a_statement_resets_results(service, statement_text):
    service.load_statement(statement_text)
    service.run()

    service.load_statement("")

    assert service.bank_lines == []
    assert service.results == []
    assert service.run() == []


def test_summary_after_promotion(service, statement_text):
    service.load_statement(statement_text, filename="may.csv")
    service.run()
    service.promote(2, ADMIN)

    summary = service.summary()

    assert summary.statement_filename == "may.csv"
    assert summary.matched_count == 3
    assert summary.unmatched_count == 0
    assert summary.total_ledger_transactions == 4
