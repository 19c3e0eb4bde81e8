"""Configuration for recipebook."""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

APP_NAME = "recipebook"

# Decimal places kept by unit conversions
QUANTITY_PRECISION = 2

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_FUZZY_CUTOFF = 70

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def get_log_level() -> str:
    """Get the log level name from RECIPEBOOK_LOG_LEVEL."""
    level = (os.getenv("RECIPEBOOK_LOG_LEVEL") or "").strip().upper()
    if level in _LOG_LEVELS:
        return level
    return DEFAULT_LOG_LEVEL


def get_fuzzy_cutoff() -> int:
    """Get the minimum rapidfuzz score (0-100) for unit suggestions."""
    raw = os.getenv("RECIPEBOOK_FUZZY_CUTOFF")
    if not raw:
        return DEFAULT_FUZZY_CUTOFF

    try:
        cutoff = int(raw)
    except ValueError:
        return DEFAULT_FUZZY_CUTOFF

    return min(max(cutoff, 0), 100)
