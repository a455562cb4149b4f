"""
tests/test_cycle.py
===================

Unit tests for cycle.maybe_advance
"""

from datetime import date

import pytest

from conftest import make_client, make_payment
from cycle import advance_message, maybe_advance
from models import InvalidClientRecord, InvalidPaymentRecord, PaymentFrequency


def test_monthly_payment_for_due_period_advances_one_month():
    client = make_client(next_payment_date=date(2024, 3, 15))
    assert maybe_advance(client, make_payment(3, 2024)) == date(2024, 4, 15)


def test_monthly_december_rolls_into_next_year():
    client = make_client(next_payment_date=date(2024, 12, 5))
    assert maybe_advance(client, make_payment(12, 2024)) == date(2025, 1, 5)


def test_monthly_end_of_month_is_clamped():
    client = make_client(next_payment_date=date(2024, 1, 31))
    assert maybe_advance(client, make_payment(1, 2024)) == date(2024, 2, 29)


@pytest.mark.parametrize("month, year", [(1, 2024), (4, 2024), (3, 2023)])
def test_monthly_other_period_does_not_advance(month, year):
    client = make_client(next_payment_date=date(2024, 3, 15))
    assert maybe_advance(client, make_payment(month, year)) is None


def test_annual_payment_for_due_year_advances_one_year():
    client = make_client(next_payment_date=date(2024, 3, 15), frequency=PaymentFrequency.ANNUAL)
    # month of the payment is irrelevant for annual plans
    assert maybe_advance(client, make_payment(9, 2024)) == date(2025, 3, 15)


def test_annual_leap_day_clamped():
    client = make_client(next_payment_date=date(2024, 2, 29), frequency=PaymentFrequency.ANNUAL)
    assert maybe_advance(client, make_payment(2, 2024)) == date(2025, 2, 28)


def test_annual_other_year_does_not_advance():
    client = make_client(next_payment_date=date(2024, 3, 15), frequency=PaymentFrequency.ANNUAL)
    assert maybe_advance(client, make_payment(3, 2025)) is None
    assert maybe_advance(client, make_payment(3, 2023)) is None


def test_advances_a_single_cycle_even_when_far_behind():
    client = make_client(next_payment_date=date(2023, 1, 15))
    assert maybe_advance(client, make_payment(1, 2023)) == date(2023, 2, 15)


def test_payment_for_other_client_rejected():
    with pytest.raises(InvalidPaymentRecord):
        maybe_advance(make_client(), make_payment(3, 2024, client_id=99))


def test_missing_anchor_rejected():
    with pytest.raises(InvalidClientRecord):
        maybe_advance(make_client(next_payment_date=None), make_payment(3, 2024))


def test_advance_message_names_client_and_date():
    msg = advance_message(make_client(), date(2024, 4, 15))
    assert "Transportes Rivera" in msg
    assert "2024-04-15" in msg
