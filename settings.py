"""
settings.py
Configuration defaults, overridable via environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

# Database
DB_FILE = Path(os.environ.get("BILLING_DB_FILE", BASE_DIR / "billing.db"))

# Roster rules
ACTIVE_WINDOW_DAYS = int(os.environ.get("BILLING_ACTIVE_WINDOW_DAYS", "60"))  # overdue days before a client is inactive
UPCOMING_HORIZON_DAYS = int(os.environ.get("BILLING_UPCOMING_HORIZON_DAYS", "15"))
UPCOMING_LIMIT = int(os.environ.get("BILLING_UPCOMING_LIMIT", "5"))

# Dashboard
REVENUE_MONTHS = int(os.environ.get("BILLING_REVENUE_MONTHS", "6"))
