"""
Pytest configuration: make the top-level modules importable regardless of
where pytest is invoked, and provide shared record factories.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from db import Store  # noqa: E402
from models import Client, Payment, PaymentFrequency, ServiceType  # noqa: E402

OWNER = "owner-1"


def make_client(
    next_payment_date=date(2024, 3, 15),
    frequency=PaymentFrequency.MONTHLY,
    registration_date=date(2023, 1, 10),
    client_id=1,
    **overrides,
) -> Client:
    fields = dict(
        id=client_id,
        owner_id=OWNER,
        name="Transportes Rivera",
        phone="6000-0001",
        email="rivera@example.com",
        service_type=ServiceType.GPS_RENTAL,
        gps_units=2,
        payment_amount=35.0,
        payment_frequency=frequency,
        next_payment_date=next_payment_date,
        registration_date=registration_date,
    )
    fields.update(overrides)
    return Client(**fields)


def make_payment(month, year, client_id=1, paid_on=None, payment_id=100, amount=35.0) -> Payment:
    return Payment(
        id=payment_id,
        owner_id=OWNER,
        client_id=client_id,
        amount=amount,
        payment_date=paid_on or date(year, month, 1),
        month=month,
        year=year,
    )


def client_data(**overrides) -> dict:
    data = {
        "name": "Logística Pérez",
        "phone": "6000-0002",
        "email": "perez@example.com",
        "service_type": "GPS - Alquiler",
        "gps_units": "3",
        "payment_amount": "45.50",
        "payment_frequency": "Mensual",
        "next_payment_date": "2024-03-15",
        "registration_date": "2024-01-05",
    }
    data.update(overrides)
    return data


@pytest.fixture
def store(tmp_path):
    s = Store(tmp_path / "billing.db")
    s.init_db()
    return s
