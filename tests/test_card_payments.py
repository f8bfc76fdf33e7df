"""Tests for card payment storage and recording."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_recon.ledger import CsvCardPaymentStore, InMemoryCardPaymentStore
from ledger_recon.models.transaction import CardPaymentDraft
from ledger_recon.services.access import AdminAccessPolicy
from ledger_recon.services.card_payments import CardPaymentService
from ledger_recon.utils.exceptions import InvalidRecordError, LedgerReadError, PermissionDeniedError

from conftest import ADMIN


def make_payment(**overrides):
    values = dict(
        card="Visa 1111",
        date=date(2024, 5, 10),
        amount=Decimal("500.00"),
        bank_used="Chase Checking",
        note="May statement",
    )
    values.update(overrides)
    return CardPaymentDraft(**values)


@pytest.fixture(params=["memory", "csv"])
def card_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryCardPaymentStore()
    return CsvCardPaymentStore(tmp_path / "cards.csv")


@pytest.fixture
def card_payments(card_store):
    return CardPaymentService(card_store, AdminAccessPolicy([ADMIN]))


def test_add_payment_round_trips_fields(card_payments, card_store):
    payment_id = card_payments.add_payment(make_payment(), ADMIN)

    [payment] = card_store.fetch_payments()
    assert payment.id == payment_id
    assert (payment.card, payment.bank_used, payment.note) == ("Visa 1111", "Chase Checking", "May statement")
    assert payment.amount == Decimal("500.00")
    assert payment.date == date(2024, 5, 10)
    assert payment.created_at is not None


def test_payments_listed_newest_first(card_payments):
    card_payments.add_payment(make_payment(date=date(2024, 4, 10), card="Amex 2222"), ADMIN)
    card_payments.add_payment(make_payment(date=date(2024, 6, 10)), ADMIN)
    card_payments.add_payment(make_payment(date=date(2024, 5, 10)), ADMIN)

    assert [p.date.month for p in card_payments.list_payments()] == [6, 5, 4]


def test_only_admins_record_payments(card_payments, card_store):
    with pytest.raises(PermissionDeniedError, match="not allowed to record card payments"):
        card_payments.add_payment(make_payment(), "tenant@example.com")

    assert card_store.fetch_payments() == []


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"card": ""}, "card"),
        ({"bank_used": "  "}, "bank_used"),
        ({"amount": Decimal("Infinity")}, "finite"),
    ],
)
def test_payment_validation(card_payments, card_store, overrides, message):
    with pytest.raises(InvalidRecordError, match=message):
        card_payments.add_payment(make_payment(**overrides), ADMIN)

    assert card_store.fetch_payments() == []


def test_csv_payments_skip_unusable_rows(tmp_path):
    path = tmp_path / "cards.csv"
    path.write_text(
        "id,card,date,amount,bank_used\n"
        "p1,Visa,2024-05-10,NaN,Chase\n"
        "p2,Visa,not a date,10,Chase\n"
        "p4,Amex,2024-05-11,75.50,Chase\n"
    )

    payments = CsvCardPaymentStore(path).fetch_payments()

    assert [p.id for p in payments] == ["p4"]
    assert payments[0].note == ""


def test_csv_payments_missing_columns(tmp_path):
    path = tmp_path / "cards.csv"
    path.write_text("card,amount\nVisa,10\n")

    with pytest.raises(LedgerReadError, match="missing columns"):
        CsvCardPaymentStore(path).fetch_payments()


def test_csv_payments_missing_file_is_empty(tmp_path):
    assert CsvCardPaymentStore(tmp_path / "none.csv").fetch_payments() == []
