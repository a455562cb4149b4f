"""
importer.py
Bulk client import from spreadsheet paste (tab-separated, header row first).
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date

import pandas as pd

from models import Client, InvalidClientRecord, build_client

logger = logging.getLogger(__name__)

# Spreadsheet header -> Client field. 'Notas' is the only optional column.
HEADER_FIELDS = {
    "Nombre": "name",
    "RUC": "ruc",
    "Teléfono": "phone",
    "Correo Electrónico": "email",
    "Tipo de Servicio": "service_type",
    "Unidades GPS": "gps_units",
    "Monto de Pago": "payment_amount",
    "Frecuencia de Pago": "payment_frequency",
    "Próxima Fecha de Pago": "next_payment_date",
    "Notas": "notes",
}
OPTIONAL_HEADERS = {"Notas"}


class ImportFormatError(ValueError):
    """The pasted block is empty or its header row does not match the template."""


@dataclass
class ImportResult:
    clients: list[Client] = field(default_factory=list)
    failed: int = 0
    errors: list[str] = field(default_factory=list)


def template_header() -> str:
    return "\t".join(HEADER_FIELDS)


def _column_map(columns) -> dict[str, str]:
    """Map pasted column names to Client fields, matching headers case-insensitively."""
    known = {h.lower(): f for h, f in HEADER_FIELDS.items()}
    mapping = {}
    for col in columns:
        key = str(col).strip().lower()
        if key in known:
            mapping[col] = known[key]

    missing = [
        h for h, f in HEADER_FIELDS.items()
        if h not in OPTIONAL_HEADERS and f not in mapping.values()
    ]
    if missing:
        raise ImportFormatError(f"Missing columns: {', '.join(missing)}")
    return mapping


def parse_pasted_clients(text: str, owner_id: str, registration_date: date | None = None) -> ImportResult:
    """
    Validate pasted rows into Client records. Invalid rows are counted and
    reported in `errors` (with their spreadsheet row number) without stopping
    the batch; a bad header or an empty paste raises ImportFormatError.
    """
    if len(text.strip().splitlines()) <= 1:
        raise ImportFormatError("No data to import. Paste the client rows including the header row.")

    result = ImportResult()
    body = text.strip("\n")
    lines = body.splitlines()
    header_width = lines[0].count("\t") + 1
    # names= as wide as the longest row keeps every line, so the frame index
    # is the line position and overflow cells stay visible
    width = max(line.count("\t") + 1 for line in lines)
    raw = pd.read_csv(
        io.StringIO(body),
        sep="\t",
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
        quoting=csv.QUOTE_NONE,
        engine="python",
    )
    headers = [str(h).strip() for h in raw.iloc[0, :header_width]]
    mapping = _column_map(headers)

    # index 0 is the header, so index + 1 is the 1-based spreadsheet row
    for idx, row in raw.iloc[1:].iterrows():
        row_no = idx + 1
        cells = ["" if pd.isna(v) else v for v in row.tolist()]
        if not any(c.strip() for c in cells):
            continue
        if any(pd.notna(v) for v in row.tolist()[header_width:]):
            result.failed += 1
            result.errors.append(f"Row {row_no}: wrong number of columns.")
            logger.warning("Import row %s rejected: wrong number of columns", row_no)
            continue

        record = {mapping[h]: v for h, v in zip(headers, cells) if h in mapping}
        try:
            client = build_client(record, owner_id, registration_date)
        except InvalidClientRecord as e:
            result.failed += 1
            result.errors.append(f"Row {row_no}: {e}")
            logger.warning("Import row %s rejected: %s", row_no, e)
            continue
        result.clients.append(client)

    logger.info("Parsed %d client(s), %d row(s) failed", len(result.clients), result.failed)
    return result
