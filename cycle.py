"""
cycle.py
Billing-cycle advancement after a payment is recorded.
"""

from __future__ import annotations

from datetime import date

from models import Client, InvalidPaymentRecord, Payment, PaymentFrequency
from status import anchor_date
from utils import add_months, add_years


def maybe_advance(client: Client, payment: Payment) -> date | None:
    """
    Return the client's new next_payment_date if `payment` settles the period
    currently due, else None.

    Back-payments and pre-payments for other periods never move the date, and a
    qualifying payment moves it exactly one cycle (one month, or one year for
    annual plans). Day-of-month is clamped to the target month, so a 31st due
    date becomes the 30th (or Feb 28/29) rather than spilling into the next month.
    """
    if payment.client_id != client.id:
        raise InvalidPaymentRecord(f"Payment is for client {payment.client_id}, not {client.id}.")

    current = anchor_date(client)

    if client.payment_frequency == PaymentFrequency.ANNUAL:
        if payment.year == current.year:
            return add_years(current, 1)
        return None

    if payment.month == current.month and payment.year == current.year:
        return add_months(current, 1)
    return None


def advance_message(client: Client, new_date: date) -> str:
    return f"Next payment date for {client.name} updated to {new_date.isoformat()}."
