"""
db.py
SQLite store for clients and payments, scoped by owner account.

A Store is an explicit object handed to whatever composes the billing logic
with persistence; there is no module-level connection or global state.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping

import settings
from cycle import maybe_advance
from models import Client, Payment, build_client, build_payment

logger = logging.getLogger(__name__)

CLIENT_COLUMNS = (
    "owner_id", "name", "ruc", "phone", "email", "service_type", "gps_units",
    "payment_amount", "payment_frequency", "next_payment_date", "registration_date", "notes",
)


class ClientNotFound(LookupError):
    """No client with that id belongs to the owner."""


@dataclass(frozen=True)
class RecordedPayment:
    payment: Payment
    advanced_to: date | None  # new next_payment_date, None if the cycle did not move


def _client_params(client: Client) -> tuple:
    return (
        client.owner_id,
        client.name,
        client.ruc,
        client.phone,
        client.email,
        client.service_type.value,
        client.gps_units,
        client.payment_amount,
        client.payment_frequency.value,
        client.next_payment_date.isoformat(),
        client.registration_date.isoformat(),
        client.notes,
    )


def _row_to_client(row: sqlite3.Row) -> Client:
    return build_client(dict(row), row["owner_id"])


def _row_to_payment(row: sqlite3.Row) -> Payment:
    return build_payment(dict(row), row["owner_id"])


class Store:
    def __init__(self, db_file: Path | str = settings.DB_FILE):
        self.db_file = Path(db_file)

    @contextmanager
    def get_conn(self):
        conn = sqlite3.connect(self.db_file, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def execute(self, sql: str, params: tuple = ()) -> int:
        with self.get_conn() as conn:
            cur = conn.execute(sql, params)
            return cur.lastrowid

    def fetch_one(self, sql: str, params: tuple = ()):
        with self.get_conn() as conn:
            cur = conn.execute(sql, params)
            return cur.fetchone()

    def fetch_all(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self.get_conn() as conn:
            cur = conn.execute(sql, params)
            return cur.fetchall()

    def init_db(self) -> None:
        """
        Create tables if missing. Safe to call on every start.
        """
        self.execute(
            """
            CREATE TABLE IF NOT EXISTS clients (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id TEXT NOT NULL,
                name TEXT NOT NULL,
                ruc TEXT,
                phone TEXT NOT NULL,
                email TEXT NOT NULL,
                service_type TEXT NOT NULL CHECK(service_type IN (
                    'GPS - Venta','GPS - Alquiler','GPS Portátil - Venta','GPS Portátil - Alquiler'
                )),
                gps_units INTEGER NOT NULL DEFAULT 0,
                payment_amount REAL NOT NULL CHECK(payment_amount >= 0),
                payment_frequency TEXT NOT NULL CHECK(payment_frequency IN ('Mensual','Anual')),
                next_payment_date TEXT NOT NULL,
                registration_date TEXT NOT NULL,
                notes TEXT
            )
            """
        )

        self.execute(
            """
            CREATE TABLE IF NOT EXISTS payments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id TEXT NOT NULL,
                client_id INTEGER NOT NULL,
                amount REAL NOT NULL,
                payment_date TEXT NOT NULL,
                month INTEGER NOT NULL CHECK(month BETWEEN 1 AND 12),
                year INTEGER NOT NULL,
                FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
            )
            """
        )

        self.execute("CREATE INDEX IF NOT EXISTS idx_clients_owner ON clients(owner_id)")
        self.execute("CREATE INDEX IF NOT EXISTS idx_payments_owner ON payments(owner_id, client_id)")

    # ---------- Clients ----------

    def list_clients(self, owner_id: str) -> list[Client]:
        rows = self.fetch_all("SELECT * FROM clients WHERE owner_id = ? ORDER BY name ASC", (owner_id,))
        return [_row_to_client(r) for r in rows]

    def get_client(self, owner_id: str, client_id: int) -> Client:
        row = self.fetch_one("SELECT * FROM clients WHERE id = ? AND owner_id = ?", (client_id, owner_id))
        if not row:
            raise ClientNotFound(f"Client {client_id} not found.")
        return _row_to_client(row)

    def create_client(self, owner_id: str, data: Mapping[str, Any]) -> Client:
        client = build_client(data, owner_id)
        return self.create_clients(owner_id, [client])[0]

    def create_clients(self, owner_id: str, clients: Iterable[Client]) -> list[Client]:
        """
        Insert already-validated clients in one transaction (bulk import).
        """
        placeholders = ",".join("?" for _ in CLIENT_COLUMNS)
        sql = f"INSERT INTO clients({', '.join(CLIENT_COLUMNS)}) VALUES({placeholders})"
        created: list[Client] = []
        with self.get_conn() as conn:
            for client in clients:
                client = replace(client, owner_id=owner_id)
                cur = conn.execute(sql, _client_params(client))
                created.append(replace(client, id=cur.lastrowid))
        logger.info("Created %d client(s) for owner %s", len(created), owner_id)
        return created

    def update_client(self, client: Client) -> Client:
        assignments = ", ".join(f"{col}=?" for col in CLIENT_COLUMNS if col != "owner_id")
        with self.get_conn() as conn:
            cur = conn.execute(
                f"UPDATE clients SET {assignments} WHERE id = ? AND owner_id = ?",
                _client_params(client)[1:] + (client.id, client.owner_id),
            )
            if cur.rowcount == 0:
                raise ClientNotFound(f"Client {client.id} not found.")
        logger.info("Updated client %s", client.id)
        return client

    def delete_client(self, owner_id: str, client_id: int) -> None:
        """
        Delete a client together with all of its payments.
        """
        with self.get_conn() as conn:
            conn.execute("DELETE FROM payments WHERE client_id = ? AND owner_id = ?", (client_id, owner_id))
            cur = conn.execute("DELETE FROM clients WHERE id = ? AND owner_id = ?", (client_id, owner_id))
            if cur.rowcount == 0:
                raise ClientNotFound(f"Client {client_id} not found.")
        logger.info("Deleted client %s and its payments", client_id)

    # ---------- Payments ----------

    def list_payments(self, owner_id: str, client_id: int | None = None) -> list[Payment]:
        sql = "SELECT * FROM payments WHERE owner_id = ?"
        params: list = [owner_id]
        if client_id is not None:
            sql += " AND client_id = ?"
            params.append(client_id)
        sql += " ORDER BY payment_date DESC, id DESC"
        return [_row_to_payment(r) for r in self.fetch_all(sql, tuple(params))]

    @staticmethod
    def _insert_payment(conn: sqlite3.Connection, payment: Payment) -> Payment:
        owned = conn.execute(
            "SELECT * FROM clients WHERE id = ? AND owner_id = ?", (payment.client_id, payment.owner_id)
        ).fetchone()
        if not owned:
            raise ClientNotFound(f"Client {payment.client_id} not found.")
        cur = conn.execute(
            "INSERT INTO payments(owner_id, client_id, amount, payment_date, month, year) VALUES(?,?,?,?,?,?)",
            (payment.owner_id, payment.client_id, payment.amount, payment.payment_date.isoformat(),
             payment.month, payment.year),
        )
        return replace(payment, id=cur.lastrowid)

    def create_payment(self, owner_id: str, data: Mapping[str, Any]) -> Payment:
        """
        Insert a payment without touching the client's billing cycle.
        """
        payment = build_payment(data, owner_id)
        with self.get_conn() as conn:
            payment = self._insert_payment(conn, payment)
        logger.info("Recorded payment %s for client %s", payment.id, payment.client_id)
        return payment

    def record_payment(self, owner_id: str, data: Mapping[str, Any]) -> RecordedPayment:
        """
        Insert a payment and, if it settles the period currently due, advance the
        client's next_payment_date by one cycle. Both writes share one transaction,
        and the advance only applies if the stored date is still the one it was
        computed from, so concurrent payments for the same period advance once.
        """
        payment = build_payment(data, owner_id)
        advanced_to = None
        with self.get_conn() as conn:
            conn.execute("BEGIN IMMEDIATE")
            payment = self._insert_payment(conn, payment)
            row = conn.execute(
                "SELECT * FROM clients WHERE id = ? AND owner_id = ?", (payment.client_id, owner_id)
            ).fetchone()
            client = _row_to_client(row)
            new_date = maybe_advance(client, payment)
            if new_date is not None:
                cur = conn.execute(
                    """
                    UPDATE clients SET next_payment_date = ?
                    WHERE id = ? AND owner_id = ? AND next_payment_date = ?
                    """,
                    (new_date.isoformat(), client.id, owner_id, row["next_payment_date"]),
                )
                if cur.rowcount == 1:
                    advanced_to = new_date
                else:
                    logger.warning("Client %s changed concurrently; cycle not advanced", client.id)

        logger.info("Recorded payment %s for client %s", payment.id, payment.client_id)
        if advanced_to is not None:
            logger.info("Client %s next payment date advanced to %s", payment.client_id, advanced_to)
        return RecordedPayment(payment=payment, advanced_to=advanced_to)
