"""
models.py
Domain records (clients, payments), enums and the validated construction step
every record passes through before reaching the status engine.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Mapping

from utils import parse_iso


class PaymentFrequency(str, Enum):
    MONTHLY = "Mensual"
    ANNUAL = "Anual"


class PaymentStatus(str, Enum):
    PAID = "Pagado"
    PENDING = "Pendiente"
    OVERDUE = "Vencido"


class ServiceType(str, Enum):
    GPS_SALE = "GPS - Venta"
    GPS_RENTAL = "GPS - Alquiler"
    PORTABLE_GPS_SALE = "GPS Portátil - Venta"
    PORTABLE_GPS_RENTAL = "GPS Portátil - Alquiler"


class InvalidClientRecord(ValueError):
    """A client record is missing a required field or carries an unusable value."""


class InvalidPaymentRecord(ValueError):
    """A payment record is malformed (bad period, amount or date)."""


@dataclass(frozen=True)
class Client:
    id: int | None
    owner_id: str
    name: str
    phone: str
    email: str
    service_type: ServiceType
    gps_units: int
    payment_amount: float
    payment_frequency: PaymentFrequency
    next_payment_date: date  # its day (and month, for annual plans) is the billing anchor
    registration_date: date
    ruc: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Payment:
    id: int | None
    owner_id: str
    client_id: int
    amount: float
    payment_date: date  # when the money arrived
    month: int  # billing period the payment is for
    year: int


@dataclass(frozen=True)
class StatusResult:
    status: PaymentStatus
    payment: Payment | None = None
    applicable: bool = True  # False: period precedes registration, reported as PAID


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def _enum_value(enum_cls, value: Any, field: str):
    try:
        return enum_cls(value if isinstance(value, enum_cls) else _text(value))
    except ValueError:
        raise InvalidClientRecord(f"{field}: unrecognised value {value!r}") from None


def _date_value(value: Any, field: str, error=InvalidClientRecord) -> date:
    if value is None or _text(value) == "":
        raise error(f"{field} is required.")
    try:
        return parse_iso(value)
    except ValueError:
        raise error(f"{field} must be a valid ISO date (YYYY-MM-DD), got {value!r}.") from None


def build_client(data: Mapping[str, Any], owner_id: str, registration_date: date | None = None) -> Client:
    """
    Validate raw field values (form input, pasted rows, database rows) and build a Client.
    Raises InvalidClientRecord on the first problem found.
    """
    name = _text(data.get("name"))
    phone = _text(data.get("phone"))
    email = _text(data.get("email"))
    for field, value in (("name", name), ("phone", phone), ("email", email)):
        if not value:
            raise InvalidClientRecord(f"{field} is required.")

    service_type = _enum_value(ServiceType, data.get("service_type"), "service_type")
    frequency = _enum_value(PaymentFrequency, data.get("payment_frequency"), "payment_frequency")
    next_payment = _date_value(data.get("next_payment_date"), "next_payment_date")

    try:
        amount = float(_text(data.get("payment_amount")))
    except ValueError:
        raise InvalidClientRecord("payment_amount must be numeric.") from None
    if not math.isfinite(amount) or amount < 0:
        raise InvalidClientRecord("payment_amount must be a finite number >= 0.")

    units_raw = _text(data.get("gps_units"))
    try:
        gps_units = int(float(units_raw)) if units_raw else 0
    except (ValueError, OverflowError):
        raise InvalidClientRecord("gps_units must be a whole number.") from None
    if gps_units < 0:
        raise InvalidClientRecord("gps_units must be >= 0.")

    if _text(data.get("registration_date")):
        registered = _date_value(data.get("registration_date"), "registration_date")
    else:
        registered = registration_date or date.today()

    return Client(
        id=data.get("id"),
        owner_id=owner_id,
        name=name,
        phone=phone,
        email=email,
        service_type=service_type,
        gps_units=gps_units,
        payment_amount=amount,
        payment_frequency=frequency,
        next_payment_date=next_payment,
        registration_date=registered,
        ruc=_optional_text(data.get("ruc")),
        notes=_optional_text(data.get("notes")),
    )


def build_payment(data: Mapping[str, Any], owner_id: str) -> Payment:
    """
    Validate and build a Payment. payment_date defaults to today.
    """
    try:
        client_id = int(data["client_id"])
        amount = float(data["amount"])
        month = int(data["month"])
        year = int(data["year"])
    except KeyError as e:
        raise InvalidPaymentRecord(f"{e.args[0]} is required.") from None
    except (TypeError, ValueError):
        raise InvalidPaymentRecord("client_id, amount, month and year must be numeric.") from None

    if not math.isfinite(amount) or amount < 0:
        raise InvalidPaymentRecord("amount must be a finite number >= 0.")
    if not 1 <= month <= 12:
        raise InvalidPaymentRecord(f"month must be between 1 and 12, got {month}.")
    if not 1 <= year <= 9999:
        raise InvalidPaymentRecord(f"year out of range: {year}.")

    if _text(data.get("payment_date")):
        paid_on = _date_value(data.get("payment_date"), "payment_date", InvalidPaymentRecord)
    else:
        paid_on = date.today()

    return Payment(
        id=data.get("id"),
        owner_id=owner_id,
        client_id=client_id,
        amount=amount,
        payment_date=paid_on,
        month=month,
        year=year,
    )
