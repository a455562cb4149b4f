"""
status.py
Payment status derivation. Pure functions: callers pass the client/payment
snapshot they hold and the current date; nothing here reads the clock or the store.

Two separate rules live here on purpose:
- status_for_period: is a specific billing period settled (per-period ledger lookup)
- roster_status / upcoming_within_days: coarse rule on next_payment_date alone
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

import settings
from models import Client, InvalidClientRecord, Payment, PaymentFrequency, PaymentStatus, StatusResult
from utils import due_date


def anchor_date(client: Client) -> date:
    """Return the client's next_payment_date, or raise if it is unusable."""
    anchor = client.next_payment_date
    if not isinstance(anchor, date):
        raise InvalidClientRecord(f"Client {client.id}: next_payment_date is missing or not a date ({anchor!r}).")
    return anchor


def _registered_after(client: Client, month: int, year: int) -> bool:
    reg = client.registration_date
    return (reg.year, reg.month) > (year, month)


def status_for_period(
    client: Client,
    month: int,
    year: int,
    payments: Iterable[Payment],
    today: date,
) -> StatusResult:
    """
    Classify the client's obligation for one billing period.

    Monthly clients need a payment for (month, year); annual clients need any
    payment for the year. Without one, the period is OVERDUE once today is past
    its due date and PENDING until then. Periods before the client's
    registration month are reported as PAID with applicable=False.
    """
    anchor = anchor_date(client)

    if _registered_after(client, month, year):
        return StatusResult(PaymentStatus.PAID, applicable=False)

    if client.payment_frequency == PaymentFrequency.ANNUAL:
        match = next((p for p in payments if p.client_id == client.id and p.year == year), None)
        due = due_date(year, anchor.month, anchor.day)
    else:
        match = next(
            (p for p in payments if p.client_id == client.id and p.month == month and p.year == year),
            None,
        )
        due = due_date(year, month, anchor.day)

    if match is not None:
        return StatusResult(PaymentStatus.PAID, payment=match)
    if today > due:
        return StatusResult(PaymentStatus.OVERDUE)
    return StatusResult(PaymentStatus.PENDING)


def period_statuses(
    clients: Iterable[Client],
    month: int,
    year: int,
    payments: Sequence[Payment],
    today: date,
    status: PaymentStatus | None = None,
) -> list[tuple[Client, StatusResult]]:
    rows = [(c, status_for_period(c, month, year, payments, today)) for c in clients]
    if status is None:
        return rows
    return [(c, r) for c, r in rows if r.status == status]


def is_currently_active(client: Client, today: date, window_days: int = settings.ACTIVE_WINDOW_DAYS) -> bool:
    """Active unless next_payment_date is more than window_days in the past."""
    return (today - anchor_date(client)).days <= window_days


def roster_status(client: Client, today: date, horizon_days: int = settings.UPCOMING_HORIZON_DAYS) -> PaymentStatus:
    due = anchor_date(client)
    # due today is already overdue on the roster
    if due <= today:
        return PaymentStatus.OVERDUE
    if (due - today).days <= horizon_days:
        return PaymentStatus.PENDING
    return PaymentStatus.PAID


def upcoming_within_days(
    clients: Iterable[Client],
    today: date,
    horizon_days: int = settings.UPCOMING_HORIZON_DAYS,
    limit: int | None = None,
) -> list[Client]:
    """
    Clients due after today and within horizon_days, soonest first.
    """
    upcoming = sorted(
        (c for c in clients if roster_status(c, today, horizon_days) == PaymentStatus.PENDING),
        key=lambda c: c.next_payment_date,
    )
    if limit is not None:
        return upcoming[:limit]
    return upcoming
