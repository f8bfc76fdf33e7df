"""Tests for the command-line interface."""

import logging
from datetime import date
from decimal import Decimal

import pytest
from click.testing import CliRunner

from ledger_recon.cli import main
from ledger_recon.ledger import CsvLedgerStore
from ledger_recon.models.transaction import TransactionDraft

from conftest import ADMIN, STATEMENT_CSV


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger("ledger_recon").handlers = []


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def files(tmp_path):
    statement = tmp_path / "statement.csv"
    statement.write_text(STATEMENT_CSV)

    ledger = tmp_path / "ledger.csv"
    store = CsvLedgerStore(ledger)
    store.create_transaction(
        TransactionDraft(
            date=date(2024, 5, 1),
            vendor="Shell",
            description="Fuel",
            amount=Decimal("42.17"),
            category="Maintenance",
            property="Elm Street",
        )
    )
    store.create_transaction(
        TransactionDraft(
            date=date(2024, 5, 2),
            vendor="Home Depot",
            description="Paint",
            amount=Decimal("118.40"),
            category="Maintenance",
            property="Oak Ave",
        )
    )

    config = tmp_path / "config.yaml"
    config.write_text(f"access:\n  admin_emails: [{ADMIN}]\n")

    return statement, ledger, config


def test_reconcile_dry_run(runner, files, tmp_path):
    statement, ledger, _ = files

    result = runner.invoke(main, ["reconcile", str(statement), str(ledger), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Dry run" in result.output
    assert not list(tmp_path.glob("*.xlsx"))


def test_reconcile_writes_report(runner, files, tmp_path):
    statement, ledger, _ = files
    report = tmp_path / "report.xlsx"

    result = runner.invoke(main, ["reconcile", str(statement), str(ledger), "-o", str(report)])

    assert result.exit_code == 0, result.output
    assert report.exists()


def test_reconcile_promotes_unmatched_for_admin(runner, files):
    statement, ledger, config = files

    result = runner.invoke(
        main,
        [
            "reconcile", str(statement), str(ledger),
            "-c", str(config), "--promote-unmatched", "--actor", ADMIN, "--dry-run",
        ],
    )

    assert result.exit_code == 0, result.output
    txns = CsvLedgerStore(ledger).fetch_transactions()
    assert len(txns) == 3
    assert txns[-1].vendor == "LOWES STORE 88"
    assert txns[-1].category == "Uncategorized"


def test_reconcile_promotion_denied_for_other_actor(runner, files):
    statement, ledger, config = files

    result = runner.invoke(
        main,
        [
            "reconcile", str(statement), str(ledger),
            "-c", str(config), "--promote-unmatched", "--actor", "tenant@example.com",
        ],
    )

    assert result.exit_code == 1
    assert "not allowed" in result.output
    assert len(CsvLedgerStore(ledger).fetch_transactions()) == 2


def test_actor_from_environment(runner, files):
    statement, ledger, config = files

    result = runner.invoke(
        main,
        ["reconcile", str(statement), str(ledger), "-c", str(config), "--promote-unmatched", "--dry-run"],
        env={"LEDGER_RECON_ACTOR": ADMIN},
    )

    assert result.exit_code == 0, result.output
    assert len(CsvLedgerStore(ledger).fetch_transactions()) == 3


def test_parse_statement(runner, files):
    statement, _, _ = files

    result = runner.invoke(main, ["parse-statement", str(statement)])

    assert result.exit_code == 0, result.output
    assert "Total bank lines: 3" in result.output


def test_export_csv_with_filters(runner, files, tmp_path):
    _, ledger, _ = files
    output = tmp_path / "export.csv"

    result = runner.invoke(
        main,
        ["export", str(ledger), "--start", "2024-05-01", "--end", "2024-05-01", "--property", "elm", "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    lines = output.read_text().strip().splitlines()
    assert lines[0] == "Date,Vendor,Amount,Category,Property,Unit,Card Used"
    assert len(lines) == 2
    assert "Shell" in lines[1]


def test_export_xlsx(runner, files, tmp_path):
    _, ledger, _ = files
    output = tmp_path / "export.xlsx"

    result = runner.invoke(main, ["export", str(ledger), "--format", "xlsx", "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert output.exists()


def test_summary(runner, files):
    _, ledger, _ = files

    result = runner.invoke(main, ["summary", str(ledger)])

    assert result.exit_code == 0, result.output
    assert "Maintenance" in result.output
    assert "Total spend: $160.57" in result.output


def test_delete_restore_and_purge(runner, files):
    _, ledger, config = files
    txn_id = CsvLedgerStore(ledger).fetch_transactions()[0].id

    result = runner.invoke(main, ["delete", str(ledger), txn_id, "-c", str(config), "--actor", ADMIN])
    assert result.exit_code == 0, result.output
    assert [t.id for t in CsvLedgerStore(ledger).list_deleted()] == [txn_id]

    result = runner.invoke(main, ["deleted", str(ledger)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(main, ["restore", str(ledger), txn_id, "-c", str(config), "--actor", ADMIN])
    assert result.exit_code == 0, result.output
    assert CsvLedgerStore(ledger).list_deleted() == []

    result = runner.invoke(main, ["purge", str(ledger), txn_id, "-c", str(config), "--actor", ADMIN, "--yes"])
    assert result.exit_code == 0, result.output
    assert len(CsvLedgerStore(ledger).fetch_transactions(include_deleted=True)) == 1


def test_restore_denied_without_admin(runner, files):
    _, ledger, config = files
    txn_id = CsvLedgerStore(ledger).fetch_transactions()[0].id

    result = runner.invoke(main, ["restore", str(ledger), txn_id, "-c", str(config), "--actor", "tenant@example.com"])

    assert result.exit_code == 1


def test_deleted_empty(runner, files):
    _, ledger, _ = files

    result = runner.invoke(main, ["deleted", str(ledger)])

    assert result.exit_code == 0
    assert "No deleted transactions" in result.output


def test_init_config(runner, tmp_path):
    output = tmp_path / "config.yaml"

    result = runner.invoke(main, ["init-config", "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert output.exists()


@pytest.mark.parametrize("tolerance", ["0", "-0.5"])
def test_reconcile_rejects_non_positive_tolerance(runner, files, tolerance):
    statement, ledger, _ = files

    result = runner.invoke(
        main, ["reconcile", str(statement), str(ledger), "--amount-tolerance", tolerance, "--dry-run"]
    )

    assert result.exit_code == 2
    assert "--amount-tolerance" in result.output


def test_list_transactions(runner, files):
    _, ledger, _ = files

    result = runner.invoke(main, ["list", str(ledger)])
    assert result.exit_code == 0, result.output
    assert "Total transactions: 2" in result.output

    result = runner.invoke(main, ["list", str(ledger), "--property", "oak"])
    assert result.exit_code == 0, result.output
    assert "Total transactions: 1" in result.output


def test_add_transaction(runner, files):
    _, ledger, config = files

    result = runner.invoke(
        main,
        [
            "add", str(ledger), "-c", str(config), "--actor", ADMIN,
            "--date", "2024-05-09", "--vendor", "Ace Hardware", "--amount", "14.25",
            "--category", "Maintenance", "--property", "Elm Street", "--card-used", "Visa 1111",
        ],
    )

    assert result.exit_code == 0, result.output
    added = CsvLedgerStore(ledger).fetch_transactions()[-1]
    assert (added.vendor, added.amount, added.date) == ("Ace Hardware", Decimal("14.25"), date(2024, 5, 9))


def test_add_transaction_denied_without_admin(runner, files):
    _, ledger, config = files

    result = runner.invoke(
        main,
        [
            "add", str(ledger), "-c", str(config), "--actor", "tenant@example.com",
            "--date", "2024-05-09", "--vendor", "Ace Hardware", "--amount", "14.25",
            "--category", "Maintenance", "--property", "Elm Street", "--card-used", "Visa 1111",
        ],
    )

    assert result.exit_code == 1
    assert "not allowed" in result.output
    assert len(CsvLedgerStore(ledger).fetch_transactions()) == 2


def test_import_transactions(runner, files, tmp_path):
    _, ledger, config = files
    source = tmp_path / "import.csv"
    source.write_text(
        "Property,Date,Vendor,Description,Amount,Category,Unit,Card\n"
        "Elm Street,2024-05-06,Ace Hardware,Hinges,14.25,Maintenance,2B,Visa 1111\n"
        "Oak Ave,2024-05-07,PG&E,Electric,88.10,Utilities,,Amex 2222\n"
    )

    result = runner.invoke(main, ["import", str(ledger), str(source), "-c", str(config), "--actor", ADMIN])

    assert result.exit_code == 0, result.output
    assert "Imported 2 transaction(s)" in result.output
    assert len(CsvLedgerStore(ledger).fetch_transactions()) == 4


def test_card_payments(runner, files, tmp_path):
    _, _, config = files
    cards_file = tmp_path / "cards.csv"

    result = runner.invoke(main, ["cards", str(cards_file)])
    assert result.exit_code == 2

    result = runner.invoke(
        main,
        [
            "add-card-payment", str(cards_file), "-c", str(config), "--actor", ADMIN,
            "--card", "Visa 1111", "--date", "2024-05-10", "--amount", "500", "--bank-used", "Chase",
        ],
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(main, ["cards", str(cards_file)])
    assert result.exit_code == 0, result.output
    assert "Visa 1111" in result.output
    assert "$500.00" in result.output


def test_card_payment_denied_without_admin(runner, files, tmp_path):
    cards_file = tmp_path / "cards.csv"

    result = runner.invoke(
        main,
        [
            "add-card-payment", str(cards_file), "--actor", ADMIN,
            "--card", "Visa 1111", "--date", "2024-05-10", "--amount", "500", "--bank-used", "Chase",
        ],
    )

    assert result.exit_code == 1
    assert "not allowed to record card payments" in result.output
    assert not cards_file.exists()
