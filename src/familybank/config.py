"""Configuration constants for FamilyBank, read from the environment."""
from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_INTEREST_RATE = Decimal(os.environ.get("FAMILYBANK_DEFAULT_INTEREST_RATE", "2.5"))
PROJECTION_YEARS = int(os.environ.get("FAMILYBANK_PROJECTION_YEARS", "5"))
APPEND_RETRIES = int(os.environ.get("FAMILYBANK_APPEND_RETRIES", "3"))
_LOG_PATH_RAW = os.environ.get("FAMILYBANK_LOG_PATH", "").strip()
LOG_PATH: Optional[Path] = Path(_LOG_PATH_RAW) if _LOG_PATH_RAW else None

__all__ = [
    "APPEND_RETRIES",
    "DEFAULT_INTEREST_RATE",
    "LOG_PATH",
    "PROJECTION_YEARS",
]
