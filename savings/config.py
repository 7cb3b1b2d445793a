"""Configuration for the savings ledger.

Business constants live here together with the few values that can be
overridden from the environment (data location, async timeout, log level).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in savings/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("SAVINGS_DATA_DIR", _PROJECT_ROOT / "data"))
SEED_PATH = Path(os.getenv("SAVINGS_SEED_PATH", DATA_DIR / "seed.json")).resolve()

# Ledger rules, in minor currency units
WITHDRAWAL_FEE = 50
MIN_DEPOSIT = 100
HISTORY_LIMIT = 5

# Monthly maintenance fee is active only at or above the minimum balance
MONTHLY_FEE = 100
FEE_MINIMUM_BALANCE = 2500

CURRENCY_SYMBOL = "₦"
DEPOSIT_METHODS = {
    "bank": "Bank Transfer",
    "card": "Debit Card",
    "ussd": "USSD Code",
}

OPERATION_TIMEOUT = float(os.getenv("SAVINGS_OPERATION_TIMEOUT", "5.0"))
LOG_LEVEL = os.getenv("SAVINGS_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging for the app and scripts."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)


def get_seed_path() -> str:
    """Get the seed file path as a string."""
    return str(SEED_PATH)
