"""
reports.py
Dashboard figures and period tables as pandas DataFrames.
"""

from __future__ import annotations

from datetime import date
from typing import Sequence

import pandas as pd

import settings
from models import Client, Payment, PaymentFrequency, PaymentStatus
from status import period_statuses, roster_status
from utils import add_months


def dashboard_stats(clients: Sequence[Client], today: date, horizon_days: int = settings.UPCOMING_HORIZON_DAYS) -> dict:
    statuses = [roster_status(c, today, horizon_days) for c in clients]
    return {
        "total_clients": len(clients),
        # estimated recurring income from monthly plans only
        "monthly_revenue": float(sum(c.payment_amount for c in clients if c.payment_frequency == PaymentFrequency.MONTHLY)),
        "paid": statuses.count(PaymentStatus.PAID),
        "pending": statuses.count(PaymentStatus.PENDING),
        "overdue": statuses.count(PaymentStatus.OVERDUE),
    }


def overdue_clients(clients: Sequence[Client], today: date, limit: int | None = settings.UPCOMING_LIMIT) -> list[Client]:
    overdue = [c for c in clients if roster_status(c, today) == PaymentStatus.OVERDUE]
    return overdue[:limit] if limit is not None else overdue


def revenue_by_month(payments: Sequence[Payment], today: date, months: int = settings.REVENUE_MONTHS) -> pd.DataFrame:
    """
    Revenue received per calendar month (by payment_date) for the last `months`
    months including the current one, oldest first. Months without payments show 0.
    """
    start = add_months(today.replace(day=1), -(months - 1))
    labels = [add_months(start, i).strftime("%Y-%m") for i in range(months)]

    df = pd.DataFrame(
        [{"month": p.payment_date.strftime("%Y-%m"), "revenue": p.amount} for p in payments],
        columns=["month", "revenue"],
    )
    totals = df.groupby("month")["revenue"].sum()
    out = totals.reindex(labels, fill_value=0.0).astype(float).reset_index()
    out.columns = ["month", "revenue"]
    return out


def period_status_frame(
    clients: Sequence[Client],
    month: int,
    year: int,
    payments: Sequence[Payment],
    today: date,
    status: PaymentStatus | None = None,
) -> pd.DataFrame:
    rows = [
        {
            "client_id": c.id,
            "client": c.name,
            "status": r.status.value,
            "amount": c.payment_amount,
            "payment_date": r.payment.payment_date.isoformat() if r.payment else None,
        }
        for c, r in period_statuses(clients, month, year, payments, today, status)
    ]
    return pd.DataFrame(rows, columns=["client_id", "client", "status", "amount", "payment_date"])


def period_status_tsv(frame: pd.DataFrame) -> str:
    """
    Tab-separated copy of a period table, ready to paste into a spreadsheet.
    """
    out = frame[["client", "status", "amount", "payment_date"]].fillna("N/A")
    out.columns = ["Cliente", "Estado", "Monto", "Fecha de Pago"]
    return out.to_csv(sep="\t", index=False, lineterminator="\n")
