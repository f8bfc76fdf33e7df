from datetime import date
from decimal import Decimal

import pytest

from ledger_recon.config import ReconConfig
from ledger_recon.ledger.store import InMemoryLedgerStore
from ledger_recon.models.transaction import BankLine, LedgerTransaction
from ledger_recon.services.access import AdminAccessPolicy
from ledger_recon.services.reconciliation import ReconciliationService

ADMIN = "owner@example.com"


def make_line(day="2024-05-01", description="SHELL OIL 4421", amount="42.17"):
    return BankLine(date=date.fromisoformat(day), description=description, amount=Decimal(amount))


def make_txn(txn_id, day="2024-05-01", vendor="Shell", amount="42.17", **extra):
    return LedgerTransaction(
        id=txn_id,
        date=date.fromisoformat(day),
        vendor=vendor,
        amount=Decimal(amount),
        **extra,
    )


@pytest.fixture
def config():
    cfg = ReconConfig()
    cfg.access.admin_emails = [ADMIN]
    return cfg


@pytest.fixture
def ledger():
    return [
        make_txn("t1", vendor="Shell", amount="42.17"),
        make_txn("t2", day="2024-05-02", vendor="Home Depot", amount="118.40"),
        make_txn("t3", day="2024-05-03", vendor="City Water", amount="63.00"),
    ]


@pytest.fixture
def store(ledger):
    return InMemoryLedgerStore(ledger)


@pytest.fixture
def service(store, config):
    return ReconciliationService(
        store=store,
        access_policy=AdminAccessPolicy.from_config(config),
        config=config,
    )


STATEMENT_CSV = """Date,Description,Amount
2024-05-01,SHELL OIL 4421,42.17
2024-05-02,HOME DEPOT #1123,118.40
2024-05-04,LOWES STORE 88,27.99
"""


@pytest.fixture
def statement_text():
    return STATEMENT_CSV
